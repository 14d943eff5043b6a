from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from unirecords.models.thesis import ThesisStatus
from unirecords.schemas.common import PartialUpdate


class ThesisCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    abstract: str = Field(..., min_length=1)
    keywords: List[str] = []
    supervisor_id: str
    # Faculty creating on a student's behalf must name the student
    student_id: Optional[str] = None


class ThesisUpdate(PartialUpdate):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    abstract: Optional[str] = Field(None, min_length=1)
    keywords: Optional[List[str]] = None
    comments: Optional[str] = None
    supervisor_id: Optional[str] = None


class ThesisStatusUpdate(BaseModel):
    status: ThesisStatus
    review_feedback: Optional[str] = None


class ThesisResponse(BaseModel):
    id: str
    title: str
    abstract: str
    keywords: List[str] = []
    document_url: Optional[str] = None
    status: ThesisStatus
    submission_date: Optional[datetime] = None
    approval_date: Optional[datetime] = None
    comments: Optional[str] = None
    review_feedback: Optional[str] = None
    student_id: str
    supervisor_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
