from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import date, datetime

from unirecords.models.admission import AdmissionStatus
from unirecords.schemas.common import PartialUpdate, UTCDateTime


class Address(BaseModel):
    street: str
    city: str
    state: str
    postal_code: str
    country: str


class PersonalDetails(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., max_length=20)
    date_of_birth: date
    gender: str
    address: Address


class EducationRecord(BaseModel):
    institution: str
    degree: str
    field: str
    start_date: date
    end_date: date
    percentage: float = Field(..., ge=0, le=100)


class AdmissionCreate(BaseModel):
    program: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    entrance_exam_score: Optional[float] = Field(None, ge=0)
    previous_education_percentage: Optional[float] = Field(None, ge=0, le=100)
    personal_details: PersonalDetails
    education_history: List[EducationRecord] = []


class AdmissionUpdate(PartialUpdate):
    program: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    entrance_exam_score: Optional[float] = Field(None, ge=0)
    previous_education_percentage: Optional[float] = Field(None, ge=0, le=100)
    personal_details: Optional[PersonalDetails] = None
    education_history: Optional[List[EducationRecord]] = None
    remarks: Optional[str] = None


class AdmissionStatusUpdate(BaseModel):
    status: AdmissionStatus
    remarks: Optional[str] = None


class InterviewSchedule(BaseModel):
    interview_date: UTCDateTime
    interview_panel: List[str] = Field(..., min_length=1)


class InterviewResult(BaseModel):
    approved: bool
    interview_notes: str = Field(..., min_length=1)
    remarks: Optional[str] = None


class AdmissionBulkCreate(BaseModel):
    applications: List[AdmissionCreate] = Field(..., min_length=1)


class AdmissionBulkStatusUpdate(BaseModel):
    admission_ids: List[str] = Field(..., min_length=1)
    status: AdmissionStatus
    remarks: Optional[str] = None


class AdmissionResponse(BaseModel):
    id: str
    application_number: str
    program: str
    department: str
    status: AdmissionStatus
    entrance_exam_score: Optional[float] = None
    previous_education_percentage: Optional[float] = None
    documents: List[str] = []
    interview_date: Optional[datetime] = None
    interview_notes: Optional[str] = None
    interview_panel: Optional[List[str]] = None
    approval_date: Optional[datetime] = None
    remarks: Optional[str] = None
    personal_details: dict
    education_history: List[dict] = []
    student_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EnrollmentResponse(BaseModel):
    admission: AdmissionResponse
    student_id: str
    registration_number: str
