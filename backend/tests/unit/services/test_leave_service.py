"""
Unit Tests for LeaveService
"""
import pytest
from datetime import date

from unirecords.core.exceptions import InvalidStatusTransitionError, ValidationError
from unirecords.models.leave import Leave, LeaveStatus, LeaveType
from unirecords.models.user import UserRole
from unirecords.schemas.leave import LeaveCreate, LeaveStatusUpdate
from unirecords.services.email_service import NotificationEvent
from unirecords.services.leave_service import LeaveService, statistics_cache_key
from unirecords.services.storage_service import UploadedFile


def leave_request(start: date, end: date, leave_type: LeaveType = LeaveType.PERSONAL) -> LeaveCreate:
    return LeaveCreate(type=leave_type, start_date=start, end_date=end, reason="Family event")


@pytest.fixture
def service(db_session, files, notifier, cache) -> LeaveService:
    return LeaveService(db_session, files, notifier, cache)


class TestApply:

    async def test_new_leave_is_pending(self, service, student_user):
        leave = await service.apply(leave_request(date(2025, 3, 1), date(2025, 3, 3)), student_user.id)

        assert leave.status == LeaveStatus.PENDING
        assert leave.applicant_id == student_user.id
        assert leave.attachments == []

    async def test_end_must_follow_start(self, service, student_user):
        with pytest.raises(ValidationError):
            await service.apply(leave_request(date(2025, 3, 3), date(2025, 3, 3)), student_user.id)

    async def test_overlapping_pending_leave_rejected(self, service, student_user):
        await service.apply(leave_request(date(2025, 3, 1), date(2025, 3, 5)), student_user.id)

        with pytest.raises(ValidationError) as exc_info:
            await service.apply(leave_request(date(2025, 3, 4), date(2025, 3, 8)), student_user.id)

        assert "overlaps" in exc_info.value.message

    async def test_leave_inside_existing_range_rejected(self, service, student_user):
        await service.apply(leave_request(date(2025, 3, 1), date(2025, 3, 10)), student_user.id)

        with pytest.raises(ValidationError):
            await service.apply(leave_request(date(2025, 3, 3), date(2025, 3, 4)), student_user.id)

    async def test_cancelled_leave_does_not_block(self, service, student_user):
        first = await service.apply(leave_request(date(2025, 3, 1), date(2025, 3, 5)), student_user.id)
        await service.cancel(first.id)

        second = await service.apply(leave_request(date(2025, 3, 2), date(2025, 3, 4)), student_user.id)

        assert second.status == LeaveStatus.PENDING

    async def test_other_applicants_do_not_conflict(self, service, student_user, faculty_user):
        await service.apply(leave_request(date(2025, 3, 1), date(2025, 3, 5)), student_user.id)

        leave = await service.apply(leave_request(date(2025, 3, 1), date(2025, 3, 5)), faculty_user.id)

        assert leave.applicant_id == faculty_user.id


class TestReview:

    async def test_approve_records_reviewer_and_notifies(self, service, notifier, student_user, admin_user):
        leave = await service.apply(leave_request(date(2025, 4, 1), date(2025, 4, 2)), student_user.id)

        approved = await service.update_status(
            leave.id, LeaveStatusUpdate(status=LeaveStatus.APPROVED, comments="Enjoy"), admin_user.id
        )

        assert approved.status == LeaveStatus.APPROVED
        assert approved.approved_by_id == admin_user.id
        assert approved.approval_date is not None
        assert approved.comments == "Enjoy"
        assert notifier.sent[-1][0] == NotificationEvent.LEAVE_STATUS
        assert notifier.sent[-1][1] == student_user.email

    async def test_second_decision_rejected(self, service, db_session, stored_status, student_user, admin_user):
        leave = await service.apply(leave_request(date(2025, 4, 1), date(2025, 4, 2)), student_user.id)
        await service.update_status(leave.id, LeaveStatusUpdate(status=LeaveStatus.APPROVED), admin_user.id)

        with pytest.raises(InvalidStatusTransitionError):
            await service.update_status(leave.id, LeaveStatusUpdate(status=LeaveStatus.APPROVED), admin_user.id)

        assert await stored_status(Leave, leave.id) == LeaveStatus.APPROVED
        assert not db_session.dirty

    async def test_reviewer_cannot_cancel(self):
        with pytest.raises(ValueError):
            LeaveStatusUpdate(status=LeaveStatus.CANCELLED)

    async def test_list_by_approver(self, service, student_user, faculty_user, admin_user, make_user):
        other_reviewer = await make_user(UserRole.ADMIN)
        first = await service.apply(leave_request(date(2025, 4, 5), date(2025, 4, 6)), student_user.id)
        second = await service.apply(leave_request(date(2025, 4, 5), date(2025, 4, 6)), faculty_user.id)
        await service.apply(leave_request(date(2025, 4, 8), date(2025, 4, 9)), student_user.id)
        await service.update_status(first.id, LeaveStatusUpdate(status=LeaveStatus.APPROVED), admin_user.id)
        await service.update_status(second.id, LeaveStatusUpdate(status=LeaveStatus.REJECTED), other_reviewer.id)

        mine = await service.list_leaves(approved_by_id=admin_user.id)

        assert [leave.id for leave in mine] == [first.id]

    async def test_cannot_cancel_decided_leave(self, service, db_session, stored_status, student_user, admin_user):
        leave = await service.apply(leave_request(date(2025, 4, 1), date(2025, 4, 2)), student_user.id)
        await service.update_status(leave.id, LeaveStatusUpdate(status=LeaveStatus.REJECTED), admin_user.id)

        with pytest.raises(InvalidStatusTransitionError):
            await service.cancel(leave.id)

        assert await stored_status(Leave, leave.id) == LeaveStatus.REJECTED
        assert not db_session.dirty


class TestDocuments:

    async def test_documents_only_while_pending(self, service, files, student_user, admin_user):
        leave = await service.apply(leave_request(date(2025, 5, 1), date(2025, 5, 2)), student_user.id)
        upload = UploadedFile(filename="note.pdf", content=b"%PDF")

        updated = await service.upload_documents(leave.id, [upload])
        assert updated.attachments == ["https://files.test/leave-documents/note.pdf"]

        await service.update_status(leave.id, LeaveStatusUpdate(status=LeaveStatus.APPROVED), admin_user.id)
        with pytest.raises(ValidationError):
            await service.upload_documents(leave.id, [upload])
        assert len(files.uploaded) == 1


class TestStatistics:

    async def test_counts_by_status(self, service, student_user, admin_user):
        first = await service.apply(leave_request(date(2025, 6, 1), date(2025, 6, 2)), student_user.id)
        await service.apply(leave_request(date(2025, 6, 10), date(2025, 6, 12)), student_user.id)
        await service.update_status(first.id, LeaveStatusUpdate(status=LeaveStatus.APPROVED), admin_user.id)

        stats = await service.get_statistics(student_user.id)

        assert stats.total == 2
        assert stats.approved == 1
        assert stats.pending == 1
        assert stats.rejected == 0

    async def test_statistics_cached_and_invalidated(self, service, cache, student_user):
        await service.get_statistics(student_user.id)
        assert statistics_cache_key(student_user.id) in cache.store

        await service.apply(leave_request(date(2025, 7, 1), date(2025, 7, 2)), student_user.id)
        assert statistics_cache_key(student_user.id) not in cache.store

        stats = await service.get_statistics(student_user.id)
        assert stats.total == 1
