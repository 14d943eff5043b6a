from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime

from unirecords.models.exam import ExamStatus, ExamType
from unirecords.schemas.common import PartialUpdate, UTCDateTime


class ExamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    course_code: str = Field(..., min_length=1, max_length=50)
    semester: int = Field(..., ge=1, le=12)
    type: ExamType
    start_time: UTCDateTime
    end_time: UTCDateTime
    venue: str = Field(..., min_length=1, max_length=255)
    max_marks: int = Field(..., gt=0)
    passing_marks: int = Field(..., ge=0)
    instructions: Optional[str] = None
    faculty_in_charge_id: str
    proctors: List[str] = []

    @model_validator(mode='after')
    def validate_marks(self):
        if self.passing_marks > self.max_marks:
            raise ValueError("Passing marks cannot exceed maximum marks")
        return self


class ExamUpdate(PartialUpdate):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    course_code: Optional[str] = Field(None, max_length=50)
    semester: Optional[int] = Field(None, ge=1, le=12)
    type: Optional[ExamType] = None
    start_time: Optional[UTCDateTime] = None
    end_time: Optional[UTCDateTime] = None
    venue: Optional[str] = Field(None, max_length=255)
    max_marks: Optional[int] = Field(None, gt=0)
    passing_marks: Optional[int] = Field(None, ge=0)
    instructions: Optional[str] = None
    remarks: Optional[str] = None
    status: Optional[ExamStatus] = None
    faculty_in_charge_id: Optional[str] = None
    proctors: Optional[List[str]] = None


class ExamStatusUpdate(BaseModel):
    status: ExamStatus
    remarks: Optional[str] = None


class ExamResponse(BaseModel):
    id: str
    title: str
    course_code: str
    semester: int
    type: ExamType
    start_time: datetime
    end_time: datetime
    venue: str
    max_marks: int
    passing_marks: int
    status: ExamStatus
    instructions: Optional[str] = None
    remarks: Optional[str] = None
    faculty_in_charge_id: str
    proctors: List[str] = []
    attachments: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
