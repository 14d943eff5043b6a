from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, JSONType, generate_uuid


class GrievanceCategory(str, enum.Enum):
    ACADEMIC = "academic"
    FINANCIAL = "financial"
    ADMINISTRATIVE = "administrative"
    INFRASTRUCTURE = "infrastructure"
    HARASSMENT = "harassment"
    EXAMINATION = "examination"
    OTHER = "other"


class GrievanceStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CLOSED = "closed"


class GrievancePriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Grievance(Base):
    """A grievance raised by any user, optionally anonymous"""
    __tablename__ = "grievances"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(GrievanceCategory), default=GrievanceCategory.OTHER, nullable=False)
    status = Column(SQLEnum(GrievanceStatus), default=GrievanceStatus.SUBMITTED, nullable=False, index=True)
    priority = Column(SQLEnum(GrievancePriority), default=GrievancePriority.MEDIUM, nullable=False)
    resolution = Column(Text, nullable=True)
    resolution_date = Column(DateTime, nullable=True)
    comments = Column(Text, nullable=True)  # timestamped log, newest last
    attachments = Column(JSONType, default=list)  # storage keys
    is_anonymous = Column(Boolean, default=False, nullable=False)

    submitter_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    assigned_to_id = Column(GUID, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    submitter = relationship("User", foreign_keys=[submitter_id], lazy="selectin")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])

    def __repr__(self):
        return f"<Grievance {self.subject[:30]} ({self.status})>"
