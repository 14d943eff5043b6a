from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, JSONType, generate_uuid


class ThesisStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    REVISION_NEEDED = "revision_needed"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"


class Thesis(Base):
    """A student's thesis under a faculty supervisor"""
    __tablename__ = "theses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    abstract = Column(Text, nullable=False)
    keywords = Column(JSONType, default=list)
    document_key = Column(String(512), nullable=True)  # storage key
    status = Column(SQLEnum(ThesisStatus), default=ThesisStatus.DRAFT, nullable=False, index=True)
    submission_date = Column(DateTime, nullable=True)
    approval_date = Column(DateTime, nullable=True)
    comments = Column(Text, nullable=True)
    review_feedback = Column(Text, nullable=True)

    student_id = Column(GUID, ForeignKey("students.id"), nullable=False, index=True)
    supervisor_id = Column(GUID, ForeignKey("faculty.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student")
    supervisor = relationship("Faculty")

    def __repr__(self):
        return f"<Thesis {self.title[:30]} ({self.status})>"
