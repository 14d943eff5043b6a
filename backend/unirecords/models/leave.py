from sqlalchemy import Column, DateTime, Date, Boolean, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, JSONType, generate_uuid


class LeaveType(str, enum.Enum):
    MEDICAL = "medical"
    PERSONAL = "personal"
    EDUCATIONAL = "educational"
    CASUAL = "casual"
    EARNED = "earned"
    MATERNITY = "maternity"
    PATERNITY = "paternity"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Leave(Base):
    """A leave application by any user"""
    __tablename__ = "leaves"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    type = Column(SQLEnum(LeaveType), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(SQLEnum(LeaveStatus), default=LeaveStatus.PENDING, nullable=False, index=True)
    comments = Column(Text, nullable=True)
    attachments = Column(JSONType, default=list)  # storage keys
    is_emergency = Column(Boolean, default=False, nullable=False)

    applicant_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    approved_by_id = Column(GUID, ForeignKey("users.id"), nullable=True)
    approval_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    applicant = relationship("User", foreign_keys=[applicant_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])

    def __repr__(self):
        return f"<Leave {self.type} {self.start_date}..{self.end_date} ({self.status})>"
