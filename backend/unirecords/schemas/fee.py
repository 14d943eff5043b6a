from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from unirecords.models.fee import PaymentMethod, PaymentStatus
from unirecords.schemas.common import PartialUpdate, UTCDateTime


class FeeCreate(BaseModel):
    student_id: str
    semester: int = Field(..., ge=1, le=12)
    fee_type: str = Field(..., min_length=1, max_length=50)
    amount: float = Field(..., gt=0)
    discount: float = Field(0, ge=0)
    due_date: UTCDateTime
    remarks: Optional[str] = None


class FeeBulkCreate(BaseModel):
    fees: List[FeeCreate] = Field(..., min_length=1)


class FeeBulkFailure(BaseModel):
    index: int
    student_id: str
    error: str


class FeeUpdate(PartialUpdate):
    semester: Optional[int] = Field(None, ge=1, le=12)
    fee_type: Optional[str] = Field(None, max_length=50)
    amount: Optional[float] = Field(None, gt=0)
    discount: Optional[float] = Field(None, ge=0)
    due_date: Optional[UTCDateTime] = None
    status: Optional[PaymentStatus] = None
    remarks: Optional[str] = None


class PaymentCreate(BaseModel):
    payment_method: PaymentMethod
    amount: Optional[float] = Field(None, gt=0, description="Defaults to the outstanding balance")
    transaction_id: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[UTCDateTime] = Field(None, description="Defaults to now")
    remarks: Optional[str] = None


class LateFeeCreate(BaseModel):
    late_fee: float = Field(..., gt=0)
    remarks: Optional[str] = None


class FeeResponse(BaseModel):
    id: str
    student_id: str
    semester: int
    fee_type: str
    amount: float
    discount: float
    late_fee: float
    amount_paid: float
    due_date: UTCDateTime
    status: PaymentStatus
    payment_date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    receipt_number: Optional[str] = None
    receipt_url: Optional[str] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
