"""
Unit Tests for GrievanceService
"""
import pytest

from unirecords.core.exceptions import InvalidStatusTransitionError, ResourceNotFoundError, ValidationError
from unirecords.models.grievance import Grievance, GrievanceCategory, GrievancePriority, GrievanceStatus
from unirecords.schemas.grievance import (
    GrievanceCreate,
    GrievanceResolution,
    GrievanceStatusUpdate,
    GrievanceUpdate,
)
from unirecords.services.email_service import NotificationEvent
from unirecords.services.grievance_service import GrievanceService, append_comment


@pytest.fixture
def service(db_session, files, notifier) -> GrievanceService:
    return GrievanceService(db_session, files, notifier)


def complaint(anonymous: bool = False) -> GrievanceCreate:
    return GrievanceCreate(
        subject="Hostel water supply",
        description="No water on the third floor since Monday.",
        category=GrievanceCategory.INFRASTRUCTURE,
        priority=GrievancePriority.HIGH,
        is_anonymous=anonymous,
    )


async def move(service, grievance_id, actor, *statuses):
    grievance = None
    for status in statuses:
        grievance = await service.update_status(grievance_id, GrievanceStatusUpdate(status=status), actor)
    return grievance


class TestAnonymity:

    async def test_named_grievance_visible_to_everyone(self, service, student_user, faculty_user):
        grievance = await service.submit(complaint(), student_user)

        view = service.view(grievance, faculty_user)

        assert view.submitter_id == student_user.id
        assert view.submitter.email == student_user.email

    async def test_anonymous_hidden_from_other_users(self, service, student_user, faculty_user):
        grievance = await service.submit(complaint(anonymous=True), student_user)

        view = service.view(grievance, faculty_user)

        assert view.submitter_id is None
        assert view.submitter is None

    async def test_anonymous_visible_to_submitter_and_committee(
        self, service, student_user, committee_user, admin_user
    ):
        grievance = await service.submit(complaint(anonymous=True), student_user)

        for viewer in (student_user, committee_user, admin_user):
            assert service.view(grievance, viewer).submitter_id == student_user.id


class TestWorkflow:

    async def test_status_change_logs_comment_and_notifies(self, service, notifier, student_user, committee_user):
        grievance = await service.submit(complaint(), student_user)

        updated = await service.update_status(
            grievance.id,
            GrievanceStatusUpdate(status=GrievanceStatus.UNDER_REVIEW, comments="Looking into it"),
            committee_user,
        )

        assert updated.status == GrievanceStatus.UNDER_REVIEW
        assert f"by {committee_user.full_name}: Looking into it" in updated.comments
        assert notifier.events() == [NotificationEvent.GRIEVANCE_STATUS]
        assert notifier.sent[0][1] == student_user.email

    async def test_cannot_skip_review(self, service, db_session, stored_status, student_user, committee_user):
        grievance = await service.submit(complaint(), student_user)

        with pytest.raises(InvalidStatusTransitionError):
            await move(service, grievance.id, committee_user, GrievanceStatus.RESOLVED)

        assert await stored_status(Grievance, grievance.id) == GrievanceStatus.SUBMITTED
        assert not db_session.dirty

    async def test_assign_unknown_user(self, service, student_user, committee_user):
        grievance = await service.submit(complaint(), student_user)

        with pytest.raises(ResourceNotFoundError):
            await service.update_status(
                grievance.id,
                GrievanceStatusUpdate(status=GrievanceStatus.UNDER_REVIEW, assigned_to_id="missing"),
                committee_user,
            )

    async def test_resolution(self, service, student_user, committee_user):
        grievance = await service.submit(complaint(), student_user)
        await move(service, grievance.id, committee_user, GrievanceStatus.UNDER_REVIEW, GrievanceStatus.IN_PROGRESS)

        resolved = await service.add_resolution(grievance.id, GrievanceResolution(resolution="Pump repaired"), committee_user)

        assert resolved.status == GrievanceStatus.RESOLVED
        assert resolved.resolution == "Pump repaired"
        assert resolved.resolution_date is not None
        assert resolved.comments.count("\n") == 2

    async def test_edit_and_delete_windows(self, service, student_user, committee_user):
        grievance = await service.submit(complaint(), student_user)
        await move(service, grievance.id, committee_user, GrievanceStatus.UNDER_REVIEW)

        edited = await service.update_grievance(grievance.id, GrievanceUpdate(priority=GrievancePriority.URGENT))
        assert edited.priority == GrievancePriority.URGENT

        with pytest.raises(ValidationError):
            await service.delete_grievance(grievance.id)

        await move(service, grievance.id, committee_user, GrievanceStatus.IN_PROGRESS)
        with pytest.raises(ValidationError):
            await service.update_grievance(grievance.id, GrievanceUpdate(subject="Changed"))


def test_append_comment_keeps_history():
    log = append_comment(None, "first")
    log = append_comment(log, "second")

    lines = log.split("\n")
    assert len(lines) == 2
    assert lines[0].endswith("first")
    assert lines[1].endswith("second")
