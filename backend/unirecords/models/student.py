from sqlalchemy import Column, String, DateTime, Date, Integer, Float, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from unirecords.core.database import Base
from unirecords.core.types import GUID, generate_uuid


class Student(Base):
    """Student profile, one per student User"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    registration_number = Column(String(50), unique=True, index=True, nullable=False)
    batch = Column(String(20), nullable=False)
    program = Column(String(100), nullable=False)
    department = Column(String(100), nullable=False, index=True)
    semester = Column(Integer, default=1, nullable=False)
    enrollment_date = Column(Date, nullable=True)
    graduation_date = Column(Date, nullable=True)
    academic_status = Column(String(20), default="active", nullable=False)  # active, graduated, suspended, withdrawn
    cgpa = Column(Float, nullable=True)

    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="student", lazy="selectin")

    def __repr__(self):
        return f"<Student {self.registration_number}>"
