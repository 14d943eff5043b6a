from sqlalchemy import Column, String, DateTime, Float, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, JSONType, generate_uuid


class AdmissionStatus(str, enum.Enum):
    APPLIED = "applied"
    DOCUMENT_VERIFICATION = "document_verification"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    APPROVED = "approved"
    REJECTED = "rejected"
    ENROLLED = "enrolled"
    CANCELLED = "cancelled"


class Admission(Base):
    """An admission application, from submission through enrollment"""
    __tablename__ = "admissions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    application_number = Column(String(20), unique=True, index=True, nullable=False)
    program = Column(String(100), nullable=False)
    department = Column(String(100), nullable=False)
    status = Column(SQLEnum(AdmissionStatus), default=AdmissionStatus.APPLIED, nullable=False, index=True)
    entrance_exam_score = Column(Float, nullable=True)
    previous_education_percentage = Column(Float, nullable=True)

    documents = Column(JSONType, default=list)  # storage keys

    interview_date = Column(DateTime, nullable=True)
    interview_notes = Column(Text, nullable=True)
    interview_panel = Column(JSONType, nullable=True)  # faculty ids
    approval_date = Column(DateTime, nullable=True)
    remarks = Column(Text, nullable=True)

    # {first_name, last_name, email, phone, date_of_birth, gender, address{...}}
    personal_details = Column(JSONType, nullable=False)
    # [{institution, degree, field, start_date, end_date, percentage}]
    education_history = Column(JSONType, default=list)

    student_id = Column(GUID, ForeignKey("students.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student")

    @property
    def applicant_email(self) -> str:
        return (self.personal_details or {}).get("email", "")

    @property
    def applicant_name(self) -> str:
        details = self.personal_details or {}
        return f"{details.get('first_name', '')} {details.get('last_name', '')}".strip()

    def __repr__(self):
        return f"<Admission {self.application_number} ({self.status})>"
