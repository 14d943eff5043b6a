"""
Admission Service Layer
Application pipeline from submission through enrollment
"""

import asyncio
import secrets
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.config import settings
from unirecords.core.exceptions import DuplicateRecordError, ResourceNotFoundError, ValidationError
from unirecords.core.logging_config import logger
from unirecords.core.security import generate_temporary_password, get_password_hash
from unirecords.models.admission import Admission, AdmissionStatus
from unirecords.models.student import Student
from unirecords.models.user import User, UserRole
from unirecords.schemas.admission import (
    AdmissionCreate,
    AdmissionResponse,
    AdmissionStatusUpdate,
    AdmissionUpdate,
    EnrollmentResponse,
    InterviewResult,
    InterviewSchedule,
)
from unirecords.services.email_service import EmailService, NotificationEvent
from unirecords.services.status_rules import ADMISSION_EDITABLE, ADMISSION_TRANSITIONS
from unirecords.services.storage_service import StorageService, UploadedFile

DOCUMENTS_FOLDER = "admissions"

UPDATABLE_FIELDS = frozenset({
    "program",
    "department",
    "entrance_exam_score",
    "previous_education_percentage",
    "personal_details",
    "education_history",
    "remarks",
})

# Stored as JSON: dump with dates as ISO strings
JSON_FIELDS = frozenset({"personal_details", "education_history"})


def generate_application_number() -> str:
    return f"APP-{secrets.token_hex(4).upper()}"


def generate_registration_number(department: str, year: Optional[int] = None) -> str:
    year = year or date.today().year
    return f"{year}{department[:3].upper()}{secrets.token_hex(2).upper()}"


def _chunks(items: Sequence, size: int) -> Iterable[Sequence]:
    for offset in range(0, len(items), size):
        yield items[offset:offset + size]


class AdmissionService:
    """Service for the admission pipeline"""

    def __init__(self, db: AsyncSession, files: StorageService, notifier: EmailService):
        self.db = db
        self.files = files
        self.notifier = notifier

    def view(self, admission: Admission) -> AdmissionResponse:
        response = AdmissionResponse.model_validate(admission)
        return response.model_copy(update={"documents": self.files.get_presigned_urls(admission.documents)})

    async def _notify_status(self, admission: Admission) -> bool:
        return await self.notifier.notify(NotificationEvent.ADMISSION_STATUS, admission.applicant_email, {
            "name": (admission.personal_details or {}).get("first_name"),
            "application_number": admission.application_number,
            "program": admission.program,
            "status": admission.status.value.replace("_", " "),
            "remarks": admission.remarks,
        })

    async def _notify_all(self, admissions: Sequence[Admission]) -> None:
        results = await asyncio.gather(
            *(self._notify_status(admission) for admission in admissions),
            return_exceptions=True,
        )
        for admission, result in zip(admissions, results):
            if isinstance(result, Exception):
                logger.log_error_with_context(result, context=f"admission email {admission.application_number}")

    # ==================== LOOKUPS ====================

    async def get_admission(self, admission_id: str) -> Admission:
        result = await self.db.execute(select(Admission).where(Admission.id == admission_id))
        admission = result.scalar_one_or_none()
        if not admission:
            raise ResourceNotFoundError("Admission", admission_id)
        return admission

    async def get(self, admission_id: str) -> AdmissionResponse:
        return self.view(await self.get_admission(admission_id))

    async def list_admissions(
        self,
        status: Optional[AdmissionStatus] = None,
        program: Optional[str] = None,
        department: Optional[str] = None,
    ) -> List[AdmissionResponse]:
        query = select(Admission)
        if status:
            query = query.where(Admission.status == status)
        if program:
            query = query.where(Admission.program == program)
        if department:
            query = query.where(Admission.department == department)

        result = await self.db.execute(query.order_by(Admission.created_at.desc()))
        return [self.view(admission) for admission in result.scalars().all()]

    # ==================== APPLICATION ====================

    @staticmethod
    def _new_admission(data: AdmissionCreate) -> Admission:
        return Admission(
            application_number=generate_application_number(),
            program=data.program,
            department=data.department,
            status=AdmissionStatus.APPLIED,
            entrance_exam_score=data.entrance_exam_score,
            previous_education_percentage=data.previous_education_percentage,
            documents=[],
            personal_details=data.personal_details.model_dump(mode="json"),
            education_history=[record.model_dump(mode="json") for record in data.education_history],
        )

    async def submit_application(self, data: AdmissionCreate) -> AdmissionResponse:
        admission = self._new_admission(data)
        self.db.add(admission)
        await self.db.commit()

        logger.info(f"[Admission] Application {admission.application_number} submitted for {admission.program}")
        await self._notify_status(admission)
        return self.view(admission)

    async def upload_documents(self, admission_id: str, uploads: Sequence[UploadedFile]) -> AdmissionResponse:
        admission = await self.get_admission(admission_id)

        keys = await self.files.upload_files(uploads, DOCUMENTS_FOLDER)
        admission.documents = [*(admission.documents or []), *keys]

        # First upload starts verification
        if admission.status == AdmissionStatus.APPLIED:
            ADMISSION_TRANSITIONS.ensure(admission.status, AdmissionStatus.DOCUMENT_VERIFICATION)
            admission.status = AdmissionStatus.DOCUMENT_VERIFICATION

        await self.db.commit()
        return self.view(admission)

    async def update_admission(self, admission_id: str, data: AdmissionUpdate) -> AdmissionResponse:
        admission = await self.get_admission(admission_id)
        if admission.status not in ADMISSION_EDITABLE:
            raise ValidationError(
                f"Admission can no longer be edited (current status: {admission.status.value})",
                field="status",
            )

        changes = data.changes(UPDATABLE_FIELDS)
        for field in JSON_FIELDS & changes.keys():
            changes[field] = data.model_dump(mode="json", include={field})[field]

        for field, value in changes.items():
            setattr(admission, field, value)

        await self.db.commit()
        return self.view(admission)

    # ==================== PIPELINE ====================

    async def update_status(self, admission_id: str, data: AdmissionStatusUpdate) -> AdmissionResponse:
        admission = await self.get_admission(admission_id)
        if data.status == AdmissionStatus.ENROLLED:
            raise ValidationError("Use the enrollment operation to enroll an applicant", field="status")
        ADMISSION_TRANSITIONS.ensure(admission.status, data.status)

        admission.status = data.status
        if data.remarks:
            admission.remarks = data.remarks
        if data.status == AdmissionStatus.APPROVED:
            admission.approval_date = datetime.utcnow()
        await self.db.commit()

        logger.info(f"[Admission] {admission.application_number} -> {admission.status.value}")
        await self._notify_status(admission)
        return self.view(admission)

    async def schedule_interview(self, admission_id: str, data: InterviewSchedule) -> AdmissionResponse:
        admission = await self.get_admission(admission_id)
        # Only reachable from document_verification
        ADMISSION_TRANSITIONS.ensure(admission.status, AdmissionStatus.INTERVIEW_SCHEDULED)

        admission.status = AdmissionStatus.INTERVIEW_SCHEDULED
        admission.interview_date = data.interview_date
        admission.interview_panel = list(data.interview_panel)
        await self.db.commit()

        await self._notify_status(admission)
        return self.view(admission)

    async def record_interview_results(self, admission_id: str, data: InterviewResult) -> AdmissionResponse:
        """interview_scheduled -> interview_completed -> approved/rejected"""
        admission = await self.get_admission(admission_id)
        outcome = AdmissionStatus.APPROVED if data.approved else AdmissionStatus.REJECTED

        current = admission.status
        if current == AdmissionStatus.INTERVIEW_SCHEDULED:
            ADMISSION_TRANSITIONS.ensure(current, AdmissionStatus.INTERVIEW_COMPLETED)
            current = AdmissionStatus.INTERVIEW_COMPLETED
        ADMISSION_TRANSITIONS.ensure(current, outcome)

        admission.status = outcome
        admission.interview_notes = data.interview_notes
        if data.remarks:
            admission.remarks = data.remarks
        if outcome == AdmissionStatus.APPROVED:
            admission.approval_date = datetime.utcnow()
        await self.db.commit()

        logger.info(f"[Admission] Interview recorded for {admission.application_number}: {outcome.value}")
        await self._notify_status(admission)
        return self.view(admission)

    async def complete_enrollment(self, admission_id: str) -> EnrollmentResponse:
        """Provision the student account for an approved applicant"""
        admission = await self.get_admission(admission_id)
        ADMISSION_TRANSITIONS.ensure(admission.status, AdmissionStatus.ENROLLED)

        details = admission.personal_details or {}
        email = admission.applicant_email.lower()
        existing = await self.db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none():
            raise DuplicateRecordError("User", "email", email)

        password = generate_temporary_password()
        today = date.today()
        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            first_name=details.get("first_name", ""),
            last_name=details.get("last_name", ""),
            contact_number=details.get("phone"),
            role=UserRole.STUDENT,
            is_active=True,
        )
        student = Student(
            registration_number=generate_registration_number(admission.department, today.year),
            batch=str(today.year),
            program=admission.program,
            department=admission.department,
            semester=1,
            enrollment_date=today,
            academic_status="active",
        )
        student.user = user
        self.db.add_all([user, student])
        await self.db.flush()

        admission.status = AdmissionStatus.ENROLLED
        admission.student_id = student.id
        await self.db.commit()

        logger.info(f"[Admission] {admission.application_number} enrolled as {student.registration_number}")

        await self.notifier.notify(NotificationEvent.ENROLLMENT, user.email, {
            "name": user.first_name,
            "program": student.program,
            "registration_number": student.registration_number,
            "email": user.email,
            "password": password,
        })
        return EnrollmentResponse(
            admission=self.view(admission),
            student_id=student.id,
            registration_number=student.registration_number,
        )

    async def cancel_admission(self, admission_id: str) -> AdmissionResponse:
        admission = await self.get_admission(admission_id)
        ADMISSION_TRANSITIONS.ensure(admission.status, AdmissionStatus.CANCELLED)

        admission.status = AdmissionStatus.CANCELLED
        await self.db.commit()

        await self._notify_status(admission)
        return self.view(admission)

    # ==================== BULK ====================

    async def bulk_submit(self, applications: Sequence[AdmissionCreate]) -> List[AdmissionResponse]:
        created: List[Admission] = []
        for chunk in _chunks(applications, settings.BULK_CHUNK_SIZE):
            admissions = [self._new_admission(data) for data in chunk]
            self.db.add_all(admissions)
            await self.db.flush()
            await self._notify_all(admissions)
            created.extend(admissions)

        await self.db.commit()
        logger.info(f"[Admission] Bulk submitted {len(created)} application(s)")
        return [self.view(admission) for admission in created]

    async def bulk_update_status(
        self,
        admission_ids: Sequence[str],
        status: AdmissionStatus,
        remarks: Optional[str] = None,
    ) -> List[AdmissionResponse]:
        """
        Move many admissions to one status.

        Every id is loaded and every transition checked first; nothing is
        changed unless all of them are allowed.
        """
        if status == AdmissionStatus.ENROLLED:
            raise ValidationError("Use the enrollment operation to enroll an applicant", field="status")

        ids = list(dict.fromkeys(admission_ids))
        loaded: Dict[str, Admission] = {}
        for chunk in _chunks(ids, settings.BULK_CHUNK_SIZE):
            result = await self.db.execute(select(Admission).where(Admission.id.in_(chunk)))
            loaded.update({admission.id: admission for admission in result.scalars().all()})

        for admission_id in ids:
            admission = loaded.get(admission_id)
            if admission is None:
                raise ResourceNotFoundError("Admission", admission_id)
            ADMISSION_TRANSITIONS.ensure(admission.status, status)

        admissions = [loaded[admission_id] for admission_id in ids]
        for chunk in _chunks(admissions, settings.BULK_CHUNK_SIZE):
            for admission in chunk:
                admission.status = status
                if remarks:
                    admission.remarks = remarks
                if status == AdmissionStatus.APPROVED:
                    admission.approval_date = datetime.utcnow()
            await self.db.flush()
            await self._notify_all(chunk)

        await self.db.commit()
        logger.info(f"[Admission] Bulk status -> {status.value} for {len(admissions)} application(s)")
        return [self.view(admission) for admission in admissions]

