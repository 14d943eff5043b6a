"""
Unit Tests for ExamService
"""
import pytest
from datetime import datetime, timedelta

from unirecords.core.exceptions import InvalidStatusTransitionError, ResourceNotFoundError, ValidationError
from unirecords.models.exam import Exam, ExamStatus, ExamType
from unirecords.schemas.exam import ExamCreate, ExamStatusUpdate, ExamUpdate
from unirecords.services.exam_service import ExamService
from unirecords.services.storage_service import UploadedFile

START = datetime(2025, 11, 20, 9, 0)


def exam_request(faculty_id: str, **overrides) -> ExamCreate:
    return ExamCreate(**{
        "title": "Data Structures Midterm",
        "course_code": "CS201",
        "semester": 3,
        "type": ExamType.MIDTERM,
        "start_time": START,
        "end_time": START + timedelta(hours=3),
        "venue": "Hall A",
        "max_marks": 100,
        "passing_marks": 40,
        "faculty_in_charge_id": faculty_id,
        **overrides,
    })


@pytest.fixture
def service(db_session, files) -> ExamService:
    return ExamService(db_session, files)


class TestScheduling:

    async def test_create_scheduled(self, service, faculty):
        exam = await service.create_exam(exam_request(faculty.id))

        assert exam.status == ExamStatus.SCHEDULED
        assert exam.attachments == []

    async def test_end_before_start(self, service, faculty):
        with pytest.raises(ValidationError):
            await service.create_exam(exam_request(faculty.id, end_time=START - timedelta(hours=1)))

    async def test_passing_marks_bounded(self, faculty):
        with pytest.raises(ValueError):
            exam_request(faculty.id, passing_marks=120)

    async def test_unknown_faculty(self, service):
        with pytest.raises(ResourceNotFoundError):
            await service.create_exam(exam_request("missing"))

    async def test_update_rechecks_window(self, service, faculty):
        exam = await service.create_exam(exam_request(faculty.id))

        with pytest.raises(ValidationError):
            await service.update_exam(exam.id, ExamUpdate(end_time=START - timedelta(minutes=5)))

    async def test_update_rechecks_marks(self, service, faculty):
        exam = await service.create_exam(exam_request(faculty.id))

        with pytest.raises(ValidationError):
            await service.update_exam(exam.id, ExamUpdate(max_marks=30))

    async def test_filters(self, service, faculty):
        await service.create_exam(exam_request(faculty.id))
        await service.create_exam(exam_request(faculty.id, course_code="CS301", type=ExamType.PRACTICAL))

        assert len(await service.list_exams(course_code="CS301")) == 1
        assert len(await service.list_exams(exam_type=ExamType.MIDTERM)) == 1
        assert len(await service.list_exams(faculty_id=faculty.id)) == 2


class TestStatus:

    async def test_lifecycle(self, service, faculty):
        exam = await service.create_exam(exam_request(faculty.id))

        await service.update_status(exam.id, ExamStatusUpdate(status=ExamStatus.ONGOING))
        done = await service.update_status(exam.id, ExamStatusUpdate(status=ExamStatus.COMPLETED, remarks="Smooth"))

        assert done.status == ExamStatus.COMPLETED
        assert done.remarks == "Smooth"

    async def test_completed_is_final(self, service, db_session, stored_status, faculty):
        exam = await service.create_exam(exam_request(faculty.id))
        await service.update_status(exam.id, ExamStatusUpdate(status=ExamStatus.ONGOING))
        await service.update_status(exam.id, ExamStatusUpdate(status=ExamStatus.COMPLETED))

        with pytest.raises(InvalidStatusTransitionError):
            await service.update_status(exam.id, ExamStatusUpdate(status=ExamStatus.SCHEDULED))

        assert await stored_status(Exam, exam.id) == ExamStatus.COMPLETED
        assert not db_session.dirty

    async def test_delete_rules(self, service, faculty):
        ongoing = await service.create_exam(exam_request(faculty.id))
        await service.update_status(ongoing.id, ExamStatusUpdate(status=ExamStatus.ONGOING))
        with pytest.raises(ValidationError):
            await service.delete_exam(ongoing.id)

        scheduled = await service.create_exam(exam_request(faculty.id, course_code="CS999"))
        await service.delete_exam(scheduled.id)
        with pytest.raises(ResourceNotFoundError):
            await service.get(scheduled.id)


class TestMaterials:

    async def test_materials_appended(self, service, faculty, files):
        exam = await service.create_exam(exam_request(faculty.id))

        await service.upload_materials(exam.id, [UploadedFile(filename="syllabus.pdf", content=b"1")])
        updated = await service.upload_materials(exam.id, [UploadedFile(filename="rules.txt", content=b"2")])

        assert updated.attachments == [
            "https://files.test/exam-materials/syllabus.pdf",
            "https://files.test/exam-materials/rules.txt",
        ]
        assert len(files.uploaded) == 2
