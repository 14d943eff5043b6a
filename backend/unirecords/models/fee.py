from sqlalchemy import Column, String, DateTime, Integer, Numeric, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, generate_uuid


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    WAIVED = "waived"


class PaymentMethod(str, enum.Enum):
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHECK = "check"
    SCHOLARSHIP = "scholarship"


class Fee(Base):
    """A fee charged to a student for one semester"""
    __tablename__ = "fees"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    semester = Column(Integer, nullable=False)
    fee_type = Column(String(50), nullable=False)  # tuition, hostel, examination, ...
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    discount = Column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    late_fee = Column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    amount_paid = Column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    due_date = Column(DateTime, nullable=False)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)

    payment_date = Column(DateTime, nullable=True)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=True)
    transaction_id = Column(String(100), nullable=True)
    receipt_number = Column(String(20), unique=True, nullable=True)
    receipt_key = Column(String(512), nullable=True)  # storage key
    remarks = Column(Text, nullable=True)

    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student")

    @property
    def total_due(self):
        return self.amount + (self.late_fee or 0)

    def __repr__(self):
        return f"<Fee {self.fee_type} {self.amount} ({self.status})>"
