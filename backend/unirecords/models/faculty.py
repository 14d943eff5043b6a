from sqlalchemy import Column, String, DateTime, Date, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from unirecords.core.database import Base
from unirecords.core.types import GUID, generate_uuid


class Faculty(Base):
    """Faculty profile, one per faculty User"""
    __tablename__ = "faculty"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    employee_id = Column(String(50), unique=True, index=True, nullable=False)
    department = Column(String(100), nullable=False, index=True)
    designation = Column(String(100), nullable=False)  # Professor, Associate Professor, ...
    specialization = Column(String(255), nullable=True)
    qualifications = Column(Text, nullable=True)
    joining_date = Column(Date, nullable=True)
    experience = Column(Integer, default=0)  # years

    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="faculty", lazy="selectin")

    def __repr__(self):
        return f"<Faculty {self.employee_id}>"
