"""
Thesis Service Layer
Drafting, submission and supervisor review
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.exceptions import ResourceNotFoundError, ValidationError
from unirecords.core.logging_config import logger
from unirecords.models.faculty import Faculty
from unirecords.models.student import Student
from unirecords.models.thesis import Thesis, ThesisStatus
from unirecords.schemas.thesis import ThesisCreate, ThesisResponse, ThesisStatusUpdate, ThesisUpdate
from unirecords.services.email_service import EmailService, NotificationEvent
from unirecords.services.status_rules import THESIS_DELETABLE, THESIS_EDITABLE, THESIS_TRANSITIONS
from unirecords.services.storage_service import StorageService, UploadedFile

DOCUMENT_FOLDER = "thesis"

UPDATABLE_FIELDS = frozenset({"title", "abstract", "keywords", "comments", "supervisor_id"})


class ThesisService:
    """Service for thesis tracking"""

    def __init__(self, db: AsyncSession, files: StorageService, notifier: EmailService):
        self.db = db
        self.files = files
        self.notifier = notifier

    def view(self, thesis: Thesis) -> ThesisResponse:
        document_url = self.files.get_presigned_url(thesis.document_key) if thesis.document_key else None
        return ThesisResponse.model_validate(thesis).model_copy(update={"document_url": document_url})

    async def get_thesis(self, thesis_id: str) -> Thesis:
        result = await self.db.execute(select(Thesis).where(Thesis.id == thesis_id))
        thesis = result.scalar_one_or_none()
        if not thesis:
            raise ResourceNotFoundError("Thesis", thesis_id)
        return thesis

    async def get(self, thesis_id: str) -> ThesisResponse:
        return self.view(await self.get_thesis(thesis_id))

    async def _get_student(self, student_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        return student

    async def student_for_user(self, user_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.user_id == user_id))
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student profile", user_id)
        return student

    async def _ensure_supervisor(self, faculty_id: str) -> None:
        result = await self.db.execute(select(Faculty.id).where(Faculty.id == faculty_id))
        if not result.scalar_one_or_none():
            raise ResourceNotFoundError("Faculty", faculty_id)

    async def list_theses(
        self,
        status: Optional[ThesisStatus] = None,
        supervisor_id: Optional[str] = None,
        student_id: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> List[ThesisResponse]:
        query = select(Thesis)
        if status:
            query = query.where(Thesis.status == status)
        if supervisor_id:
            query = query.where(Thesis.supervisor_id == supervisor_id)
        if student_id:
            query = query.where(Thesis.student_id == student_id)
        if keyword:
            pattern = f"%{keyword}%"
            query = query.where(or_(Thesis.title.ilike(pattern), Thesis.abstract.ilike(pattern)))

        result = await self.db.execute(query.order_by(Thesis.created_at.desc()))
        return [self.view(thesis) for thesis in result.scalars().all()]

    async def list_for_user(self, user_id: str) -> List[ThesisResponse]:
        student = await self.student_for_user(user_id)
        return await self.list_theses(student_id=student.id)

    # ========== DRAFTING ==========

    async def create_thesis(self, data: ThesisCreate, student_id: str) -> ThesisResponse:
        await self._get_student(student_id)
        await self._ensure_supervisor(data.supervisor_id)

        thesis = Thesis(
            title=data.title,
            abstract=data.abstract,
            keywords=list(data.keywords),
            supervisor_id=data.supervisor_id,
            student_id=student_id,
            status=ThesisStatus.DRAFT,
        )
        self.db.add(thesis)
        await self.db.commit()

        logger.info(f"[Thesis] Draft {thesis.id} created for student {student_id}")
        return self.view(thesis)

    def _ensure_editable(self, thesis: Thesis) -> None:
        if thesis.status not in THESIS_EDITABLE:
            raise ValidationError(
                f"Thesis can only be changed while in draft or revision_needed (current status: {thesis.status.value})",
                field="status",
            )

    async def update_thesis(self, thesis_id: str, data: ThesisUpdate) -> ThesisResponse:
        thesis = await self.get_thesis(thesis_id)
        self._ensure_editable(thesis)

        changes = data.changes(UPDATABLE_FIELDS)
        if "supervisor_id" in changes:
            await self._ensure_supervisor(changes["supervisor_id"])

        for field, value in changes.items():
            setattr(thesis, field, value)

        await self.db.commit()
        return self.view(thesis)

    async def upload_document(self, thesis_id: str, upload: UploadedFile) -> ThesisResponse:
        thesis = await self.get_thesis(thesis_id)
        self._ensure_editable(thesis)
        THESIS_TRANSITIONS.ensure(thesis.status, ThesisStatus.SUBMITTED)

        previous_key = thesis.document_key
        thesis.document_key = await self.files.upload_file(upload, DOCUMENT_FOLDER)
        thesis.status = ThesisStatus.SUBMITTED
        thesis.submission_date = datetime.utcnow()
        await self.db.commit()
        if previous_key:
            await self.files.delete_file(previous_key)

        logger.info(f"[Thesis] {thesis.id} submitted")
        return self.view(thesis)

    # ========== REVIEW ==========

    async def update_status(self, thesis_id: str, data: ThesisStatusUpdate) -> ThesisResponse:
        thesis = await self.get_thesis(thesis_id)
        THESIS_TRANSITIONS.ensure(thesis.status, data.status)

        thesis.status = data.status
        if data.review_feedback:
            thesis.review_feedback = data.review_feedback
        if data.status == ThesisStatus.APPROVED:
            thesis.approval_date = datetime.utcnow()
        await self.db.commit()

        logger.info(f"[Thesis] {thesis.id} -> {thesis.status.value}")

        student = await self._get_student(thesis.student_id)
        await self.notifier.notify(NotificationEvent.THESIS_STATUS, student.user.email, {
            "name": student.user.first_name,
            "title": thesis.title,
            "status": thesis.status.value.replace("_", " "),
            "review_feedback": thesis.review_feedback,
        })
        return self.view(thesis)

    async def delete_thesis(self, thesis_id: str) -> None:
        thesis = await self.get_thesis(thesis_id)
        if thesis.status not in THESIS_DELETABLE:
            raise ValidationError(
                f"Only draft theses can be deleted (current status: {thesis.status.value})",
                field="status",
            )
        await self.db.delete(thesis)
        await self.db.commit()
