"""
Grievance Service Layer
Submission, review workflow and anonymized views
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.exceptions import ResourceNotFoundError, ValidationError
from unirecords.core.logging_config import logger
from unirecords.models.grievance import Grievance, GrievanceCategory, GrievancePriority, GrievanceStatus
from unirecords.models.user import User, UserRole
from unirecords.schemas.grievance import (
    GrievanceCreate,
    GrievanceResolution,
    GrievanceResponse,
    GrievanceStatusUpdate,
    GrievanceUpdate,
)
from unirecords.services.email_service import EmailService, NotificationEvent
from unirecords.services.status_rules import GRIEVANCE_DELETABLE, GRIEVANCE_EDITABLE, GRIEVANCE_TRANSITIONS
from unirecords.services.storage_service import StorageService, UploadedFile

ATTACHMENTS_FOLDER = "grievances"

UPDATABLE_FIELDS = frozenset({"subject", "description", "category", "priority", "is_anonymous"})

# Roles that always see who filed an anonymous grievance
IDENTITY_ROLES = frozenset({UserRole.ADMIN, UserRole.GRIEVANCE_COMMITTEE})


def can_see_submitter(grievance: Grievance, viewer: User) -> bool:
    if not grievance.is_anonymous:
        return True
    return viewer.id == grievance.submitter_id or viewer.role in IDENTITY_ROLES


def append_comment(log: Optional[str], message: str) -> str:
    line = f"[{datetime.utcnow():%Y-%m-%d %H:%M} UTC] {message}"
    return f"{log}\n{line}" if log else line


class GrievanceService:
    """Service for grievance handling"""

    def __init__(self, db: AsyncSession, files: StorageService, notifier: EmailService):
        self.db = db
        self.files = files
        self.notifier = notifier

    def view(self, grievance: Grievance, viewer: User) -> GrievanceResponse:
        """Response for `viewer`, with the submitter removed when they may not see it"""
        response = GrievanceResponse.model_validate(grievance)
        update = {"attachments": self.files.get_presigned_urls(grievance.attachments)}
        if not can_see_submitter(grievance, viewer):
            update.update(submitter_id=None, submitter=None)
        return response.model_copy(update=update)

    # ========== LOOKUPS ==========

    async def get_grievance(self, grievance_id: str) -> Grievance:
        result = await self.db.execute(select(Grievance).where(Grievance.id == grievance_id))
        grievance = result.scalar_one_or_none()
        if not grievance:
            raise ResourceNotFoundError("Grievance", grievance_id)
        return grievance

    async def list_grievances(
        self,
        status: Optional[GrievanceStatus] = None,
        category: Optional[GrievanceCategory] = None,
        priority: Optional[GrievancePriority] = None,
        assigned_to_id: Optional[str] = None,
        submitter_id: Optional[str] = None,
    ) -> List[Grievance]:
        query = select(Grievance)
        if status:
            query = query.where(Grievance.status == status)
        if category:
            query = query.where(Grievance.category == category)
        if priority:
            query = query.where(Grievance.priority == priority)
        if assigned_to_id:
            query = query.where(Grievance.assigned_to_id == assigned_to_id)
        if submitter_id:
            query = query.where(Grievance.submitter_id == submitter_id)

        result = await self.db.execute(query.order_by(Grievance.created_at.desc()))
        return list(result.scalars().all())

    # ========== SUBMISSION ==========

    async def submit(self, data: GrievanceCreate, submitter: User) -> Grievance:
        grievance = Grievance(
            subject=data.subject,
            description=data.description,
            category=data.category,
            priority=data.priority,
            is_anonymous=data.is_anonymous,
            status=GrievanceStatus.SUBMITTED,
            attachments=[],
        )
        grievance.submitter = submitter
        self.db.add(grievance)
        await self.db.commit()

        logger.info(f"[Grievance] {grievance.id} submitted ({grievance.category.value}, {grievance.priority.value})")
        return grievance

    async def upload_attachments(self, grievance_id: str, uploads: Sequence[UploadedFile]) -> Grievance:
        grievance = await self.get_grievance(grievance_id)

        keys = await self.files.upload_files(uploads, ATTACHMENTS_FOLDER)
        grievance.attachments = [*(grievance.attachments or []), *keys]
        await self.db.commit()
        return grievance

    async def update_grievance(self, grievance_id: str, data: GrievanceUpdate) -> Grievance:
        grievance = await self.get_grievance(grievance_id)
        if grievance.status not in GRIEVANCE_EDITABLE:
            raise ValidationError(
                f"Grievance can no longer be edited (current status: {grievance.status.value})",
                field="status",
            )

        for field, value in data.changes(UPDATABLE_FIELDS).items():
            setattr(grievance, field, value)

        await self.db.commit()
        return grievance

    # ========== WORKFLOW ==========

    async def _notify_submitter(self, grievance: Grievance, comments: Optional[str] = None) -> None:
        submitter = grievance.submitter
        await self.notifier.notify(NotificationEvent.GRIEVANCE_STATUS, submitter.email, {
            "name": submitter.first_name,
            "subject": grievance.subject,
            "status": grievance.status.value.replace("_", " "),
            "comments": comments or grievance.resolution,
        })

    async def update_status(self, grievance_id: str, data: GrievanceStatusUpdate, actor: User) -> Grievance:
        grievance = await self.get_grievance(grievance_id)
        GRIEVANCE_TRANSITIONS.ensure(grievance.status, data.status)

        if data.assigned_to_id:
            result = await self.db.execute(select(User.id).where(User.id == data.assigned_to_id))
            if not result.scalar_one_or_none():
                raise ResourceNotFoundError("User", data.assigned_to_id)
            grievance.assigned_to_id = data.assigned_to_id

        grievance.status = data.status
        message = f"Status changed to {data.status.value} by {actor.full_name}"
        if data.comments:
            message = f"{message}: {data.comments}"
        grievance.comments = append_comment(grievance.comments, message)
        if data.status == GrievanceStatus.RESOLVED:
            grievance.resolution_date = datetime.utcnow()
        await self.db.commit()

        logger.info(f"[Grievance] {grievance.id} -> {grievance.status.value}")
        await self._notify_submitter(grievance, data.comments)
        return grievance

    async def add_resolution(self, grievance_id: str, data: GrievanceResolution, actor: User) -> Grievance:
        grievance = await self.get_grievance(grievance_id)
        GRIEVANCE_TRANSITIONS.ensure(grievance.status, GrievanceStatus.RESOLVED)

        grievance.status = GrievanceStatus.RESOLVED
        grievance.resolution = data.resolution
        grievance.resolution_date = datetime.utcnow()
        grievance.comments = append_comment(grievance.comments, f"Resolved by {actor.full_name}")
        await self.db.commit()

        await self._notify_submitter(grievance)
        return grievance

    async def delete_grievance(self, grievance_id: str) -> None:
        grievance = await self.get_grievance(grievance_id)
        if grievance.status not in GRIEVANCE_DELETABLE:
            raise ValidationError(
                f"Only submitted grievances can be deleted (current status: {grievance.status.value})",
                field="status",
            )
        await self.db.delete(grievance)
        await self.db.commit()
