from pydantic import BaseModel, EmailStr, Field
from typing import Dict, Optional
from datetime import date, datetime

from unirecords.schemas.common import PartialUpdate, UserSummary


class FacultyCreate(BaseModel):
    # Account
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=20)

    # Profile
    employee_id: str = Field(..., min_length=1, max_length=50)
    department: str = Field(..., min_length=1, max_length=100)
    designation: str = Field(..., min_length=1, max_length=100)
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    joining_date: Optional[date] = None
    experience: int = Field(0, ge=0)


class FacultyUpdate(PartialUpdate):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=20)
    profile_picture: Optional[str] = None

    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    joining_date: Optional[date] = None
    experience: Optional[int] = Field(None, ge=0)


class FacultyResponse(BaseModel):
    id: str
    employee_id: str
    department: str
    designation: str
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    joining_date: Optional[date] = None
    experience: Optional[int] = None
    user_id: str
    user: Optional[UserSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeachingLoad(BaseModel):
    faculty_id: str
    total_exams: int
    by_status: Dict[str, int]
