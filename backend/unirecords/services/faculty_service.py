"""
Faculty Service Layer
Handles faculty profiles and teaching-load lookups
"""

from typing import List, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.exceptions import DuplicateRecordError, ResourceNotFoundError
from unirecords.core.logging_config import logger
from unirecords.core.security import get_password_hash
from unirecords.models.exam import Exam
from unirecords.models.faculty import Faculty
from unirecords.models.user import User, UserRole
from unirecords.schemas.faculty import FacultyCreate, FacultyUpdate, TeachingLoad
from unirecords.services.email_service import EmailService, NotificationEvent

USER_FIELDS = frozenset({"first_name", "last_name", "contact_number", "profile_picture"})
PROFILE_FIELDS = frozenset({
    "department",
    "designation",
    "specialization",
    "qualifications",
    "joining_date",
    "experience",
})
UPDATABLE_FIELDS = USER_FIELDS | PROFILE_FIELDS


class FacultyService:
    """Service for faculty-specific operations"""

    def __init__(self, db: AsyncSession, notifier: EmailService):
        self.db = db
        self.notifier = notifier

    # ==================== PROFILE MANAGEMENT ====================

    async def get_faculty(self, faculty_id: str) -> Faculty:
        result = await self.db.execute(select(Faculty).where(Faculty.id == faculty_id))
        faculty = result.scalar_one_or_none()
        if not faculty:
            raise ResourceNotFoundError("Faculty", faculty_id)
        return faculty

    async def get_by_user_id(self, user_id: str) -> Faculty:
        result = await self.db.execute(select(Faculty).where(Faculty.user_id == user_id))
        faculty = result.scalar_one_or_none()
        if not faculty:
            raise ResourceNotFoundError("Faculty profile", user_id)
        return faculty

    async def get_by_employee_id(self, employee_id: str) -> Faculty:
        result = await self.db.execute(select(Faculty).where(Faculty.employee_id == employee_id))
        faculty = result.scalar_one_or_none()
        if not faculty:
            raise ResourceNotFoundError("Faculty", employee_id)
        return faculty

    async def list_faculty(
        self,
        department: Optional[str] = None,
        designation: Optional[str] = None,
    ) -> List[Faculty]:
        query = select(Faculty)
        if department:
            query = query.where(Faculty.department == department)
        if designation:
            query = query.where(Faculty.designation == designation)

        result = await self.db.execute(query.order_by(Faculty.employee_id))
        return list(result.scalars().all())

    async def create_faculty(self, data: FacultyCreate) -> Faculty:
        existing = await self.db.execute(select(User.id).where(User.email == data.email.lower()))
        if existing.scalar_one_or_none():
            raise DuplicateRecordError("User", "email", data.email)

        existing = await self.db.execute(select(Faculty.id).where(Faculty.employee_id == data.employee_id))
        if existing.scalar_one_or_none():
            raise DuplicateRecordError("Faculty", "employee_id", data.employee_id)

        user = User(
            email=data.email.lower(),
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            contact_number=data.contact_number,
            role=UserRole.FACULTY,
            is_active=True,
        )
        faculty = Faculty(
            employee_id=data.employee_id,
            department=data.department,
            designation=data.designation,
            specialization=data.specialization,
            qualifications=data.qualifications,
            joining_date=data.joining_date,
            experience=data.experience,
        )
        faculty.user = user
        self.db.add_all([user, faculty])
        await self.db.commit()

        logger.info(f"[Faculty] Created {faculty.employee_id} for {user.email}")

        await self.notifier.notify(NotificationEvent.WELCOME, user.email, {
            "name": user.first_name,
            "role": "faculty",
            "email": user.email,
        })
        return faculty

    async def update_faculty(self, faculty_id: str, data: FacultyUpdate) -> Faculty:
        faculty = await self.get_faculty(faculty_id)

        for field, value in data.changes(UPDATABLE_FIELDS).items():
            target = faculty.user if field in USER_FIELDS else faculty
            setattr(target, field, value)

        await self.db.commit()
        return faculty

    async def delete_faculty(self, faculty_id: str) -> None:
        faculty = await self.get_faculty(faculty_id)
        user_id = faculty.user_id

        await self.db.delete(faculty)
        await self.db.flush()
        await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.commit()

        logger.info(f"[Faculty] Deleted {faculty.employee_id}")

    # ==================== TEACHING LOAD ====================

    async def get_teaching_load(self, faculty_id: str) -> TeachingLoad:
        """Exams this faculty member is in charge of, counted by status"""
        await self.get_faculty(faculty_id)

        result = await self.db.execute(
            select(Exam.status, func.count(Exam.id))
            .where(Exam.faculty_in_charge_id == faculty_id)
            .group_by(Exam.status)
        )
        by_status = {status.value: count for status, count in result.all()}

        return TeachingLoad(
            faculty_id=faculty_id,
            total_exams=sum(by_status.values()),
            by_status=by_status,
        )
