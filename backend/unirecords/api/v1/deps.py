"""
Per-request service providers.

Collaborators (file store, notifier, cache) are provided by their own
functions so tests can swap them through ``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.database import get_db
from unirecords.core.redis_client import RedisClient, redis_client
from unirecords.services.admission_service import AdmissionService
from unirecords.services.audit_service import AuditService
from unirecords.services.auth_service import AuthService
from unirecords.services.email_service import EmailService, get_email_service
from unirecords.services.exam_service import ExamService
from unirecords.services.faculty_service import FacultyService
from unirecords.services.fee_service import FeeService
from unirecords.services.grievance_service import GrievanceService
from unirecords.services.health_service import HealthService
from unirecords.services.leave_service import LeaveService
from unirecords.services.storage_service import StorageService, get_storage_service
from unirecords.services.student_service import StudentService
from unirecords.services.thesis_service import ThesisService


def get_file_store() -> StorageService:
    return get_storage_service()


def get_notifier() -> EmailService:
    return get_email_service()


def get_cache() -> RedisClient:
    return redis_client


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    notifier: EmailService = Depends(get_notifier),
) -> AuthService:
    return AuthService(db, notifier)


def get_student_service(
    db: AsyncSession = Depends(get_db),
    notifier: EmailService = Depends(get_notifier),
) -> StudentService:
    return StudentService(db, notifier)


def get_faculty_service(
    db: AsyncSession = Depends(get_db),
    notifier: EmailService = Depends(get_notifier),
) -> FacultyService:
    return FacultyService(db, notifier)


def get_exam_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
) -> ExamService:
    return ExamService(db, files)


def get_fee_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
    notifier: EmailService = Depends(get_notifier),
) -> FeeService:
    return FeeService(db, files, notifier)


def get_admission_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
    notifier: EmailService = Depends(get_notifier),
) -> AdmissionService:
    return AdmissionService(db, files, notifier)


def get_grievance_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
    notifier: EmailService = Depends(get_notifier),
) -> GrievanceService:
    return GrievanceService(db, files, notifier)


def get_leave_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
    notifier: EmailService = Depends(get_notifier),
    cache: RedisClient = Depends(get_cache),
) -> LeaveService:
    return LeaveService(db, files, notifier, cache)


def get_thesis_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
    notifier: EmailService = Depends(get_notifier),
) -> ThesisService:
    return ThesisService(db, files, notifier)


def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_health_service(
    db: AsyncSession = Depends(get_db),
    files: StorageService = Depends(get_file_store),
    notifier: EmailService = Depends(get_notifier),
    cache: RedisClient = Depends(get_cache),
) -> HealthService:
    return HealthService(db, files, notifier, cache)
