from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

from unirecords.models.leave import LeaveStatus, LeaveType


class LeaveCreate(BaseModel):
    type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1)
    is_emergency: bool = False


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus
    comments: Optional[str] = None

    @field_validator('status')
    @classmethod
    def reviewer_outcome(cls, value: LeaveStatus) -> LeaveStatus:
        # Cancellation belongs to the applicant, not the reviewer
        if value not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            raise ValueError("Status must be either approved or rejected")
        return value


class LeaveResponse(BaseModel):
    id: str
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    comments: Optional[str] = None
    attachments: List[str] = []
    is_emergency: bool
    applicant_id: str
    approved_by_id: Optional[str] = None
    approval_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeaveStatistics(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
