from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date, datetime

from unirecords.schemas.common import PartialUpdate, UserSummary


class StudentCreate(BaseModel):
    # Account
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=20)

    # Profile
    registration_number: str = Field(..., min_length=1, max_length=50)
    batch: str = Field(..., min_length=1, max_length=20)
    program: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    semester: int = Field(1, ge=1, le=12)
    enrollment_date: Optional[date] = None
    academic_status: str = "active"
    cgpa: Optional[float] = Field(None, ge=0, le=10)


class StudentUpdate(PartialUpdate):
    # Account fields
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=20)
    profile_picture: Optional[str] = None

    # Profile fields
    batch: Optional[str] = Field(None, max_length=20)
    program: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    semester: Optional[int] = Field(None, ge=1, le=12)
    enrollment_date: Optional[date] = None
    graduation_date: Optional[date] = None
    academic_status: Optional[str] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)


class StudentResponse(BaseModel):
    id: str
    registration_number: str
    batch: str
    program: str
    department: str
    semester: int
    enrollment_date: Optional[date] = None
    graduation_date: Optional[date] = None
    academic_status: str
    cgpa: Optional[float] = None
    user_id: str
    user: Optional[UserSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
