"""
Unit Tests for FeeService
"""
import pytest
from datetime import datetime, timedelta, timezone

from unirecords.core.exceptions import InvalidStatusTransitionError, ResourceNotFoundError, ValidationError
from unirecords.models.fee import Fee, PaymentMethod, PaymentStatus
from unirecords.schemas.fee import FeeCreate, FeeUpdate, LateFeeCreate, PaymentCreate
from unirecords.services.email_service import NotificationEvent
from unirecords.services.fee_service import FeeService, generate_receipt_number, settle_status
from unirecords.services.storage_service import UploadedFile


def fee_request(student_id: str, amount: float = 1000.0, **overrides) -> FeeCreate:
    return FeeCreate(
        student_id=student_id,
        semester=overrides.pop("semester", 1),
        fee_type=overrides.pop("fee_type", "tuition"),
        amount=amount,
        due_date=overrides.pop("due_date", datetime(2025, 8, 1, 12, 0)),
        **overrides,
    )


@pytest.fixture
def service(db_session, files, notifier) -> FeeService:
    return FeeService(db_session, files, notifier)


class TestHelpers:

    def test_receipt_number_format(self):
        number = generate_receipt_number()

        assert number.startswith("RCP-")
        assert len(number) == 12
        assert number[4:] == number[4:].upper()

    def test_settle_status(self):
        assert settle_status(500, 1000) == PaymentStatus.PARTIAL
        assert settle_status(1000, 1000) == PaymentStatus.PAID
        assert settle_status(1200, 1000) == PaymentStatus.PAID


class TestCreate:

    async def test_new_fee_is_pending(self, service, student):
        fee = await service.create_fee(fee_request(student.id, discount=100))

        assert fee.status == PaymentStatus.PENDING
        assert fee.amount_paid == 0
        assert fee.late_fee == 0
        assert fee.discount == 100
        assert fee.receipt_number is None

    async def test_unknown_student(self, service):
        with pytest.raises(ResourceNotFoundError):
            await service.create_fee(fee_request("00000000-0000-0000-0000-000000000000"))

    async def test_aware_due_date_stored_as_utc(self, service, student):
        due = datetime(2025, 8, 1, 17, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))

        fee = await service.create_fee(fee_request(student.id, due_date=due))

        assert fee.due_date == datetime(2025, 8, 1, 12, 0)

    async def test_bulk_create_reports_failures(self, service, student):
        items = [
            fee_request(student.id, fee_type="tuition"),
            fee_request("missing-student", fee_type="hostel"),
            fee_request(student.id, fee_type="library"),
        ]

        result = await service.bulk_create(items)

        assert [fee.fee_type for fee in result["created"]] == ["tuition", "library"]
        assert len(result["failed"]) == 1
        assert result["failed"][0].index == 1
        assert result["failed"][0].student_id == "missing-student"


class TestPayments:

    async def test_partial_then_paid(self, service, notifier, student):
        fee = await service.create_fee(fee_request(student.id, amount=1000))

        partial = await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE, amount=400))
        assert partial.status == PaymentStatus.PARTIAL
        assert partial.amount_paid == 400
        assert partial.receipt_number.startswith("RCP-")

        paid = await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.CASH, amount=600))
        assert paid.status == PaymentStatus.PAID
        assert paid.amount_paid == 1000
        assert paid.payment_date is not None

        assert notifier.events() == [NotificationEvent.FEE_PAYMENT, NotificationEvent.FEE_PAYMENT]
        assert notifier.sent[0][1] == student.user.email

    async def test_amount_defaults_to_outstanding_balance(self, service, student):
        fee = await service.create_fee(fee_request(student.id, amount=750))

        paid = await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.BANK_TRANSFER))

        assert paid.status == PaymentStatus.PAID
        assert paid.amount_paid == 750

    async def test_payment_date_taken_from_request(self, service, student):
        fee = await service.create_fee(fee_request(student.id, amount=500))
        paid_on = datetime(2025, 7, 14, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))

        paid = await service.record_payment(
            fee.id, PaymentCreate(payment_method=PaymentMethod.CHECK, payment_date=paid_on)
        )

        assert paid.payment_date == datetime(2025, 7, 14, 5, 0)

    async def test_late_fee_raises_the_threshold(self, service, student):
        fee = await service.create_fee(fee_request(student.id, amount=1000))
        await service.add_late_fee(fee.id, LateFeeCreate(late_fee=50))

        partial = await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE, amount=1000))

        assert partial.status == PaymentStatus.PARTIAL

    async def test_nothing_outstanding_on_paid_fee(self, service, student):
        fee = await service.create_fee(fee_request(student.id, amount=300))
        await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE))

        with pytest.raises(ValidationError):
            await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE))

    async def test_overpayment_on_paid_fee_is_invalid_transition(self, service, db_session, stored_status, student):
        fee = await service.create_fee(fee_request(student.id, amount=300))
        await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE))

        with pytest.raises(InvalidStatusTransitionError):
            await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE, amount=10))

        assert await stored_status(Fee, fee.id) == PaymentStatus.PAID
        assert not db_session.dirty


class TestAdjustments:

    async def test_late_fees_accumulate(self, service, student):
        fee = await service.create_fee(fee_request(student.id))

        await service.add_late_fee(fee.id, LateFeeCreate(late_fee=50))
        updated = await service.add_late_fee(fee.id, LateFeeCreate(late_fee=25, remarks="Second notice"))

        assert updated.late_fee == 75
        assert updated.remarks == "Second notice"

    async def test_late_fee_only_on_pending(self, service, student):
        fee = await service.create_fee(fee_request(student.id, amount=1000))
        await service.record_payment(fee.id, PaymentCreate(payment_method=PaymentMethod.ONLINE, amount=100))

        with pytest.raises(ValidationError):
            await service.add_late_fee(fee.id, LateFeeCreate(late_fee=50))

    async def test_status_update_checked_against_table(self, service, db_session, stored_status, student):
        fee = await service.create_fee(fee_request(student.id))
        await service.update_fee(fee.id, FeeUpdate(status=PaymentStatus.WAIVED))

        with pytest.raises(InvalidStatusTransitionError):
            await service.update_fee(fee.id, FeeUpdate(status=PaymentStatus.PENDING))

        assert await stored_status(Fee, fee.id) == PaymentStatus.WAIVED
        assert not db_session.dirty

    async def test_delete_only_pending(self, service, student):
        pending = await service.create_fee(fee_request(student.id, fee_type="hostel"))
        await service.delete_fee(pending.id)
        with pytest.raises(ResourceNotFoundError):
            await service.get(pending.id)

        waived = await service.create_fee(fee_request(student.id, fee_type="library"))
        await service.update_fee(waived.id, FeeUpdate(status=PaymentStatus.WAIVED))
        with pytest.raises(ValidationError):
            await service.delete_fee(waived.id)

    async def test_receipt_url_presigned(self, service, student):
        fee = await service.create_fee(fee_request(student.id))
        updated = await service.upload_receipt(fee.id, UploadedFile(filename="receipt.pdf", content=b"%PDF"))

        assert updated.receipt_url == "https://files.test/receipts/receipt.pdf"

    async def test_replacing_receipt_deletes_previous_file(self, service, files, student):
        fee = await service.create_fee(fee_request(student.id))
        await service.upload_receipt(fee.id, UploadedFile(filename="scan.jpg", content=b"\xff\xd8"))

        updated = await service.upload_receipt(fee.id, UploadedFile(filename="receipt.pdf", content=b"%PDF"))

        assert updated.receipt_url == "https://files.test/receipts/receipt.pdf"
        assert files.deleted == ["receipts/scan.jpg"]
