"""
Leave Service Layer
Applications, review decisions and per-user statistics
"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.config import settings
from unirecords.core.exceptions import ResourceNotFoundError, ValidationError
from unirecords.core.logging_config import logger
from unirecords.core.redis_client import RedisClient
from unirecords.models.leave import Leave, LeaveStatus, LeaveType
from unirecords.models.user import User
from unirecords.schemas.leave import LeaveCreate, LeaveResponse, LeaveStatistics, LeaveStatusUpdate
from unirecords.services.email_service import EmailService, NotificationEvent
from unirecords.services.status_rules import LEAVE_TRANSITIONS
from unirecords.services.storage_service import StorageService, UploadedFile

DOCUMENTS_FOLDER = "leave-documents"

# Statuses that block another leave over the same days
ACTIVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


def statistics_cache_key(user_id: str) -> str:
    return f"leave_stats:{user_id}"


class LeaveService:
    """Service for leave applications"""

    def __init__(self, db: AsyncSession, files: StorageService, notifier: EmailService, cache: RedisClient):
        self.db = db
        self.files = files
        self.notifier = notifier
        self.cache = cache

    def view(self, leave: Leave) -> LeaveResponse:
        response = LeaveResponse.model_validate(leave)
        return response.model_copy(update={"attachments": self.files.get_presigned_urls(leave.attachments)})

    async def get_leave(self, leave_id: str) -> Leave:
        result = await self.db.execute(select(Leave).where(Leave.id == leave_id))
        leave = result.scalar_one_or_none()
        if not leave:
            raise ResourceNotFoundError("Leave", leave_id)
        return leave

    async def get(self, leave_id: str) -> LeaveResponse:
        return self.view(await self.get_leave(leave_id))

    async def list_leaves(
        self,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        applicant_id: Optional[str] = None,
        approved_by_id: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> List[LeaveResponse]:
        query = select(Leave)
        if status:
            query = query.where(Leave.status == status)
        if leave_type:
            query = query.where(Leave.type == leave_type)
        if applicant_id:
            query = query.where(Leave.applicant_id == applicant_id)
        if approved_by_id:
            query = query.where(Leave.approved_by_id == approved_by_id)
        if from_date:
            query = query.where(Leave.end_date >= from_date)
        if to_date:
            query = query.where(Leave.start_date <= to_date)

        result = await self.db.execute(query.order_by(Leave.start_date.desc()))
        return [self.view(leave) for leave in result.scalars().all()]

    # ========== APPLICATION ==========

    async def _find_overlap(self, applicant_id: str, start_date: date, end_date: date) -> Optional[Leave]:
        result = await self.db.execute(
            select(Leave).where(
                Leave.applicant_id == applicant_id,
                Leave.status.in_(ACTIVE_STATUSES),
                Leave.start_date <= end_date,
                Leave.end_date >= start_date,
            ).limit(1)
        )
        return result.scalar_one_or_none()

    async def apply(self, data: LeaveCreate, applicant_id: str) -> LeaveResponse:
        if data.start_date >= data.end_date:
            raise ValidationError("End date must be after start date", field="end_date")

        overlap = await self._find_overlap(applicant_id, data.start_date, data.end_date)
        if overlap:
            raise ValidationError(
                f"Leave overlaps an existing {overlap.status.value} leave "
                f"({overlap.start_date} to {overlap.end_date})",
                field="start_date",
            )

        leave = Leave(
            type=data.type,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
            is_emergency=data.is_emergency,
            status=LeaveStatus.PENDING,
            attachments=[],
            applicant_id=applicant_id,
        )
        self.db.add(leave)
        await self.db.commit()
        await self.cache.cache_delete(statistics_cache_key(applicant_id))

        logger.info(f"[Leave] {leave.type.value} leave applied by {applicant_id}: {leave.start_date}..{leave.end_date}")
        return self.view(leave)

    async def upload_documents(self, leave_id: str, uploads: Sequence[UploadedFile]) -> LeaveResponse:
        leave = await self.get_leave(leave_id)
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError(
                f"Documents can only be added to pending leaves (current status: {leave.status.value})",
                field="status",
            )

        keys = await self.files.upload_files(uploads, DOCUMENTS_FOLDER)
        leave.attachments = [*(leave.attachments or []), *keys]
        await self.db.commit()
        return self.view(leave)

    # ========== REVIEW ==========

    async def update_status(self, leave_id: str, data: LeaveStatusUpdate, reviewer_id: str) -> LeaveResponse:
        leave = await self.get_leave(leave_id)
        LEAVE_TRANSITIONS.ensure(leave.status, data.status)

        leave.status = data.status
        leave.approved_by_id = reviewer_id
        leave.approval_date = datetime.utcnow()
        if data.comments:
            leave.comments = data.comments
        await self.db.commit()
        await self.cache.cache_delete(statistics_cache_key(leave.applicant_id))

        logger.info(f"[Leave] {leave.id} {leave.status.value} by {reviewer_id}")

        result = await self.db.execute(select(User).where(User.id == leave.applicant_id))
        applicant = result.scalar_one_or_none()
        if applicant:
            await self.notifier.notify(NotificationEvent.LEAVE_STATUS, applicant.email, {
                "name": applicant.first_name,
                "leave_type": leave.type.value,
                "start_date": leave.start_date.isoformat(),
                "end_date": leave.end_date.isoformat(),
                "status": leave.status.value,
                "comments": leave.comments,
            })
        return self.view(leave)

    async def cancel(self, leave_id: str) -> LeaveResponse:
        leave = await self.get_leave(leave_id)
        LEAVE_TRANSITIONS.ensure(leave.status, LeaveStatus.CANCELLED)

        leave.status = LeaveStatus.CANCELLED
        await self.db.commit()
        await self.cache.cache_delete(statistics_cache_key(leave.applicant_id))
        return self.view(leave)

    # ========== STATISTICS ==========

    async def get_statistics(self, user_id: str) -> LeaveStatistics:
        key = statistics_cache_key(user_id)
        cached = await self.cache.cache_get(key)
        if cached:
            return LeaveStatistics(**cached)

        result = await self.db.execute(
            select(Leave.status, func.count(Leave.id))
            .where(Leave.applicant_id == user_id)
            .group_by(Leave.status)
        )
        counts = {status.value: count for status, count in result.all()}
        stats = LeaveStatistics(total=sum(counts.values()), **counts)

        await self.cache.cache_set(key, stats.model_dump(), expire=settings.CACHE_TTL_SECONDS)
        return stats
