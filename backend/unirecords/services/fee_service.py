"""
Fee Service Layer
Fee records, payments, receipts and late fees
"""

import secrets
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.config import settings
from unirecords.core.exceptions import ResourceNotFoundError, ValidationError
from unirecords.core.logging_config import logger
from unirecords.models.fee import Fee, PaymentStatus
from unirecords.models.student import Student
from unirecords.schemas.fee import (
    FeeBulkFailure,
    FeeCreate,
    FeeResponse,
    FeeUpdate,
    LateFeeCreate,
    PaymentCreate,
)
from unirecords.services.email_service import EmailService, NotificationEvent
from unirecords.services.status_rules import FEE_DELETABLE, FEE_TRANSITIONS
from unirecords.services.storage_service import StorageService, UploadedFile

RECEIPTS_FOLDER = "receipts"

UPDATABLE_FIELDS = frozenset({"semester", "fee_type", "amount", "discount", "due_date", "status", "remarks"})


def generate_receipt_number() -> str:
    return f"RCP-{secrets.token_hex(4).upper()}"


def settle_status(amount_paid: float, total_due: float) -> PaymentStatus:
    """Status a fee reaches once `amount_paid` has been received in total"""
    return PaymentStatus.PAID if amount_paid >= total_due else PaymentStatus.PARTIAL


class FeeService:
    """Service for fee management"""

    def __init__(self, db: AsyncSession, files: StorageService, notifier: EmailService):
        self.db = db
        self.files = files
        self.notifier = notifier

    def view(self, fee: Fee) -> FeeResponse:
        receipt_url = self.files.get_presigned_url(fee.receipt_key) if fee.receipt_key else None
        return FeeResponse.model_validate(fee).model_copy(update={"receipt_url": receipt_url})

    # ========== LOOKUPS ==========

    async def get_fee(self, fee_id: str) -> Fee:
        result = await self.db.execute(select(Fee).where(Fee.id == fee_id))
        fee = result.scalar_one_or_none()
        if not fee:
            raise ResourceNotFoundError("Fee", fee_id)
        return fee

    async def get(self, fee_id: str) -> FeeResponse:
        return self.view(await self.get_fee(fee_id))

    async def _get_student(self, student_id: str) -> Student:
        result = await self.db.execute(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        return student

    async def owner_user_id(self, fee: Fee) -> Optional[str]:
        """User id of the student a fee belongs to"""
        result = await self.db.execute(select(Student.user_id).where(Student.id == fee.student_id))
        return result.scalar_one_or_none()

    async def list_fees(
        self,
        student_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
        semester: Optional[int] = None,
        fee_type: Optional[str] = None,
        due_before: Optional[datetime] = None,
        due_after: Optional[datetime] = None,
    ) -> List[FeeResponse]:
        query = select(Fee)
        if student_id:
            query = query.where(Fee.student_id == student_id)
        if status:
            query = query.where(Fee.status == status)
        if semester:
            query = query.where(Fee.semester == semester)
        if fee_type:
            query = query.where(Fee.fee_type == fee_type)
        if due_before:
            query = query.where(Fee.due_date <= due_before)
        if due_after:
            query = query.where(Fee.due_date >= due_after)

        result = await self.db.execute(query.order_by(Fee.due_date))
        return [self.view(fee) for fee in result.scalars().all()]

    async def list_for_user(self, user_id: str) -> List[FeeResponse]:
        result = await self.db.execute(select(Student.id).where(Student.user_id == user_id))
        student_id = result.scalar_one_or_none()
        if not student_id:
            raise ResourceNotFoundError("Student profile", user_id)
        return await self.list_fees(student_id=student_id)

    # ========== CREATION ==========

    @staticmethod
    def _new_fee(data: FeeCreate) -> Fee:
        return Fee(
            student_id=data.student_id,
            semester=data.semester,
            fee_type=data.fee_type,
            amount=data.amount,
            discount=data.discount or 0,
            late_fee=0,
            amount_paid=0,
            due_date=data.due_date,
            status=PaymentStatus.PENDING,
            remarks=data.remarks,
        )

    async def create_fee(self, data: FeeCreate) -> FeeResponse:
        await self._get_student(data.student_id)

        fee = self._new_fee(data)
        self.db.add(fee)
        await self.db.commit()

        logger.info(f"[Fee] Created {fee.fee_type} fee of {fee.amount} for student {fee.student_id}")
        return self.view(fee)

    async def bulk_create(self, items: List[FeeCreate]) -> Dict[str, Any]:
        """
        Create many fees, chunk by chunk.

        Entries whose student does not exist are reported in `failed` with
        their input index; the rest are committed together.
        """
        created: List[Fee] = []
        failed: List[FeeBulkFailure] = []
        chunk_size = settings.BULK_CHUNK_SIZE

        for offset in range(0, len(items), chunk_size):
            chunk = items[offset:offset + chunk_size]
            student_ids = {item.student_id for item in chunk}
            result = await self.db.execute(select(Student.id).where(Student.id.in_(student_ids)))
            known = set(result.scalars().all())

            fees = []
            for index, item in enumerate(chunk, start=offset):
                if item.student_id not in known:
                    failed.append(FeeBulkFailure(
                        index=index,
                        student_id=item.student_id,
                        error=f"Student with ID '{item.student_id}' not found",
                    ))
                    continue
                fees.append(self._new_fee(item))

            self.db.add_all(fees)
            await self.db.flush()
            created.extend(fees)

        await self.db.commit()
        logger.info(f"[Fee] Bulk create: {len(created)} created, {len(failed)} failed")

        return {
            "created": [self.view(fee) for fee in created],
            "failed": failed,
        }

    # ========== UPDATES ==========

    async def update_fee(self, fee_id: str, data: FeeUpdate) -> FeeResponse:
        fee = await self.get_fee(fee_id)
        changes = data.changes(UPDATABLE_FIELDS)

        if "status" in changes and changes["status"] != fee.status:
            FEE_TRANSITIONS.ensure(fee.status, changes["status"])

        for field, value in changes.items():
            setattr(fee, field, value)

        await self.db.commit()
        return self.view(fee)

    async def record_payment(self, fee_id: str, data: PaymentCreate) -> FeeResponse:
        fee = await self.get_fee(fee_id)

        already_paid = fee.amount_paid or 0
        outstanding = fee.total_due - already_paid
        amount = data.amount if data.amount is not None else outstanding
        if amount <= 0:
            raise ValidationError("Nothing is outstanding on this fee", field="amount")

        target = settle_status(already_paid + amount, fee.total_due)
        FEE_TRANSITIONS.ensure(fee.status, target)

        fee.amount_paid = already_paid + amount
        fee.status = target
        fee.payment_method = data.payment_method
        fee.transaction_id = data.transaction_id
        fee.payment_date = data.payment_date or datetime.utcnow()
        fee.receipt_number = generate_receipt_number()
        if data.remarks:
            fee.remarks = data.remarks
        await self.db.commit()

        logger.info(f"[Fee] Payment of {amount} on {fee.id}: {fee.status.value}, receipt {fee.receipt_number}")

        student = await self._get_student(fee.student_id)
        await self.notifier.notify(NotificationEvent.FEE_PAYMENT, student.user.email, {
            "name": student.user.first_name,
            "amount_paid": f"{amount:.2f}",
            "fee_type": fee.fee_type,
            "semester": fee.semester,
            "status": fee.status.value,
            "receipt_number": fee.receipt_number,
        })
        return self.view(fee)

    async def upload_receipt(self, fee_id: str, upload: UploadedFile) -> FeeResponse:
        fee = await self.get_fee(fee_id)

        previous_key = fee.receipt_key
        fee.receipt_key = await self.files.upload_file(upload, RECEIPTS_FOLDER)
        await self.db.commit()
        if previous_key:
            await self.files.delete_file(previous_key)
        return self.view(fee)

    async def add_late_fee(self, fee_id: str, data: LateFeeCreate) -> FeeResponse:
        fee = await self.get_fee(fee_id)
        if fee.status != PaymentStatus.PENDING:
            raise ValidationError(
                f"Late fees can only be added to pending fees (current status: {fee.status.value})",
                field="status",
            )

        fee.late_fee = (fee.late_fee or 0) + data.late_fee
        if data.remarks:
            fee.remarks = data.remarks
        await self.db.commit()
        return self.view(fee)

    async def delete_fee(self, fee_id: str) -> None:
        fee = await self.get_fee(fee_id)
        if fee.status not in FEE_DELETABLE:
            raise ValidationError(
                f"Only pending fees can be deleted (current status: {fee.status.value})",
                field="status",
            )
        await self.db.delete(fee)
        await self.db.commit()
