"""
Student Service Layer
Account + profile management for students
"""

from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.exceptions import DuplicateRecordError, ResourceNotFoundError
from unirecords.core.logging_config import logger
from unirecords.core.security import get_password_hash
from unirecords.models.student import Student
from unirecords.models.user import User, UserRole
from unirecords.schemas.student import StudentCreate, StudentUpdate
from unirecords.services.email_service import EmailService, NotificationEvent

USER_FIELDS = frozenset({"first_name", "last_name", "contact_number", "profile_picture"})
PROFILE_FIELDS = frozenset({
    "batch",
    "program",
    "department",
    "semester",
    "enrollment_date",
    "graduation_date",
    "academic_status",
    "cgpa",
})
UPDATABLE_FIELDS = USER_FIELDS | PROFILE_FIELDS


class StudentService:
    """Service for managing student records"""

    def __init__(self, db: AsyncSession, notifier: EmailService):
        self.db = db
        self.notifier = notifier

    # ========== LOOKUPS ==========

    async def get_student(self, student_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        return student

    async def get_by_user_id(self, user_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.user_id == user_id))
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student profile", user_id)
        return student

    async def find_by_user_id(self, user_id: str) -> Optional[Student]:
        result = await self.db.execute(select(Student).where(Student.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_by_registration_number(self, registration_number: str) -> Student:
        result = await self.db.execute(
            select(Student).where(Student.registration_number == registration_number)
        )
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", registration_number)
        return student

    async def list_students(
        self,
        department: Optional[str] = None,
        batch: Optional[str] = None,
        program: Optional[str] = None,
        semester: Optional[int] = None,
        academic_status: Optional[str] = None,
    ) -> List[Student]:
        query = select(Student)
        if department:
            query = query.where(Student.department == department)
        if batch:
            query = query.where(Student.batch == batch)
        if program:
            query = query.where(Student.program == program)
        if semester:
            query = query.where(Student.semester == semester)
        if academic_status:
            query = query.where(Student.academic_status == academic_status)

        result = await self.db.execute(query.order_by(Student.registration_number))
        return list(result.scalars().all())

    # ========== MUTATIONS ==========

    async def create_student(self, data: StudentCreate) -> Student:
        existing = await self.db.execute(select(User.id).where(User.email == data.email.lower()))
        if existing.scalar_one_or_none():
            raise DuplicateRecordError("User", "email", data.email)

        existing = await self.db.execute(
            select(Student.id).where(Student.registration_number == data.registration_number)
        )
        if existing.scalar_one_or_none():
            raise DuplicateRecordError("Student", "registration_number", data.registration_number)

        user = User(
            email=data.email.lower(),
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            contact_number=data.contact_number,
            role=UserRole.STUDENT,
            is_active=True,
        )
        student = Student(
            registration_number=data.registration_number,
            batch=data.batch,
            program=data.program,
            department=data.department,
            semester=data.semester,
            enrollment_date=data.enrollment_date,
            academic_status=data.academic_status,
            cgpa=data.cgpa,
        )
        student.user = user
        self.db.add_all([user, student])
        await self.db.commit()

        logger.info(f"[Student] Created {student.registration_number} for {user.email}")

        await self.notifier.notify(NotificationEvent.WELCOME, user.email, {
            "name": user.first_name,
            "role": "student",
            "email": user.email,
        })
        return student

    async def update_student(self, student_id: str, data: StudentUpdate) -> Student:
        student = await self.get_student(student_id)
        changes = data.changes(UPDATABLE_FIELDS)

        for field, value in changes.items():
            target = student.user if field in USER_FIELDS else student
            setattr(target, field, value)

        await self.db.commit()
        return student

    async def delete_student(self, student_id: str) -> None:
        student = await self.get_student(student_id)
        user_id = student.user_id

        await self.db.delete(student)
        await self.db.flush()
        await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.commit()

        logger.info(f"[Student] Deleted {student.registration_number}")
