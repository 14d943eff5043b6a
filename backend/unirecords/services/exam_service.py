"""
Exam Service Layer
Scheduling, status changes and exam materials
"""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.exceptions import ResourceNotFoundError, ValidationError
from unirecords.core.logging_config import logger
from unirecords.models.exam import Exam, ExamStatus, ExamType
from unirecords.models.faculty import Faculty
from unirecords.schemas.exam import ExamCreate, ExamResponse, ExamStatusUpdate, ExamUpdate
from unirecords.services.status_rules import EXAM_DELETABLE, EXAM_TRANSITIONS
from unirecords.services.storage_service import StorageService, UploadedFile

MATERIALS_FOLDER = "exam-materials"

UPDATABLE_FIELDS = frozenset({
    "title",
    "course_code",
    "semester",
    "type",
    "start_time",
    "end_time",
    "venue",
    "max_marks",
    "passing_marks",
    "instructions",
    "remarks",
    "status",
    "faculty_in_charge_id",
    "proctors",
})


class ExamService:
    """Service for exam scheduling"""

    def __init__(self, db: AsyncSession, files: StorageService):
        self.db = db
        self.files = files

    def view(self, exam: Exam) -> ExamResponse:
        response = ExamResponse.model_validate(exam)
        return response.model_copy(update={"attachments": self.files.get_presigned_urls(exam.attachments)})

    async def get_exam(self, exam_id: str) -> Exam:
        result = await self.db.execute(select(Exam).where(Exam.id == exam_id))
        exam = result.scalar_one_or_none()
        if not exam:
            raise ResourceNotFoundError("Exam", exam_id)
        return exam

    async def _ensure_faculty(self, faculty_id: str) -> None:
        result = await self.db.execute(select(Faculty.id).where(Faculty.id == faculty_id))
        if not result.scalar_one_or_none():
            raise ResourceNotFoundError("Faculty", faculty_id)

    @staticmethod
    def _check_window(start_time: datetime, end_time: datetime) -> None:
        if end_time <= start_time:
            raise ValidationError("End time must be after start time", field="end_time")

    async def create_exam(self, data: ExamCreate) -> ExamResponse:
        self._check_window(data.start_time, data.end_time)
        await self._ensure_faculty(data.faculty_in_charge_id)

        exam = Exam(
            **data.model_dump(),
            status=ExamStatus.SCHEDULED,
            attachments=[],
        )
        self.db.add(exam)
        await self.db.commit()

        logger.info(f"[Exam] Scheduled {exam.course_code} {exam.type.value} at {exam.start_time}")
        return self.view(exam)

    async def list_exams(
        self,
        course_code: Optional[str] = None,
        semester: Optional[int] = None,
        exam_type: Optional[ExamType] = None,
        status: Optional[ExamStatus] = None,
        faculty_id: Optional[str] = None,
        start_after: Optional[datetime] = None,
        start_before: Optional[datetime] = None,
    ) -> List[ExamResponse]:
        query = select(Exam)
        if course_code:
            query = query.where(Exam.course_code == course_code)
        if semester:
            query = query.where(Exam.semester == semester)
        if exam_type:
            query = query.where(Exam.type == exam_type)
        if status:
            query = query.where(Exam.status == status)
        if faculty_id:
            query = query.where(Exam.faculty_in_charge_id == faculty_id)
        if start_after:
            query = query.where(Exam.start_time >= start_after)
        if start_before:
            query = query.where(Exam.start_time <= start_before)

        result = await self.db.execute(query.order_by(Exam.start_time))
        return [self.view(exam) for exam in result.scalars().all()]

    async def get(self, exam_id: str) -> ExamResponse:
        return self.view(await self.get_exam(exam_id))

    async def update_exam(self, exam_id: str, data: ExamUpdate) -> ExamResponse:
        exam = await self.get_exam(exam_id)
        changes = data.changes(UPDATABLE_FIELDS)

        self._check_window(
            changes.get("start_time", exam.start_time),
            changes.get("end_time", exam.end_time),
        )
        if changes.get("passing_marks", exam.passing_marks) > changes.get("max_marks", exam.max_marks):
            raise ValidationError("Passing marks cannot exceed maximum marks", field="passing_marks")
        if "status" in changes and changes["status"] != exam.status:
            EXAM_TRANSITIONS.ensure(exam.status, changes["status"])
        if "faculty_in_charge_id" in changes:
            await self._ensure_faculty(changes["faculty_in_charge_id"])

        for field, value in changes.items():
            setattr(exam, field, value)

        await self.db.commit()
        return self.view(exam)

    async def update_status(self, exam_id: str, data: ExamStatusUpdate) -> ExamResponse:
        exam = await self.get_exam(exam_id)
        EXAM_TRANSITIONS.ensure(exam.status, data.status)

        exam.status = data.status
        if data.remarks:
            exam.remarks = data.remarks
        await self.db.commit()

        logger.info(f"[Exam] {exam.id} status -> {exam.status.value}")
        return self.view(exam)

    async def delete_exam(self, exam_id: str) -> None:
        exam = await self.get_exam(exam_id)
        if exam.status not in EXAM_DELETABLE:
            raise ValidationError(
                f"Only scheduled or cancelled exams can be deleted (current status: {exam.status.value})",
                field="status",
            )
        await self.db.delete(exam)
        await self.db.commit()

    async def upload_materials(self, exam_id: str, uploads: Sequence[UploadedFile]) -> ExamResponse:
        exam = await self.get_exam(exam_id)

        keys = await self.files.upload_files(uploads, MATERIALS_FOLDER)
        exam.attachments = [*(exam.attachments or []), *keys]
        await self.db.commit()

        logger.info(f"[Exam] {len(keys)} material(s) added to {exam.id}")
        return self.view(exam)
