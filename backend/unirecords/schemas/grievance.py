from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from unirecords.models.grievance import GrievanceCategory, GrievancePriority, GrievanceStatus
from unirecords.schemas.common import PartialUpdate, UserSummary


class GrievanceCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: GrievanceCategory = GrievanceCategory.OTHER
    priority: GrievancePriority = GrievancePriority.MEDIUM
    is_anonymous: bool = False


class GrievanceUpdate(PartialUpdate):
    subject: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[GrievanceCategory] = None
    priority: Optional[GrievancePriority] = None
    is_anonymous: Optional[bool] = None


class GrievanceStatusUpdate(BaseModel):
    status: GrievanceStatus
    comments: Optional[str] = None
    assigned_to_id: Optional[str] = None


class GrievanceResolution(BaseModel):
    resolution: str = Field(..., min_length=1)


class GrievanceResponse(BaseModel):
    id: str
    subject: str
    description: str
    category: GrievanceCategory
    status: GrievanceStatus
    priority: GrievancePriority
    resolution: Optional[str] = None
    resolution_date: Optional[datetime] = None
    comments: Optional[str] = None
    attachments: List[str] = []
    is_anonymous: bool
    submitter_id: Optional[str] = None
    submitter: Optional[UserSummary] = None
    assigned_to_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
