from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, JSONType, generate_uuid


class ExamType(str, enum.Enum):
    INTERNAL = "internal"
    MIDTERM = "midterm"
    FAT = "fat"  # final assessment test
    PRACTICAL = "practical"
    VIVA = "viva"


class ExamStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"


class Exam(Base):
    """Scheduled exam with a faculty member in charge"""
    __tablename__ = "exams"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    course_code = Column(String(50), nullable=False, index=True)
    semester = Column(Integer, nullable=False)
    type = Column(SQLEnum(ExamType), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    venue = Column(String(255), nullable=False)
    max_marks = Column(Integer, nullable=False)
    passing_marks = Column(Integer, nullable=False)
    status = Column(SQLEnum(ExamStatus), default=ExamStatus.SCHEDULED, nullable=False, index=True)
    instructions = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)

    faculty_in_charge_id = Column(GUID, ForeignKey("faculty.id"), nullable=False, index=True)
    proctors = Column(JSONType, default=list)  # faculty ids
    attachments = Column(JSONType, default=list)  # storage keys

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    faculty_in_charge = relationship("Faculty")

    def __repr__(self):
        return f"<Exam {self.course_code} {self.type}>"
