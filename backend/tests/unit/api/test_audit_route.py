"""
Unit Tests for the audited route class
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from unirecords.middleware.audit import infer_action
from unirecords.models.audit_log import AuditAction, AuditLog, AuditResource
from unirecords.utils.uploads import EXAM_MATERIALS

EXAM_PAYLOAD = {
    'title': 'Operating Systems Midterm',
    'course_code': 'CS302',
    'semester': 5,
    'type': 'midterm',
    'start_time': '2025-11-20T09:00:00',
    'end_time': '2025-11-20T12:00:00',
    'venue': 'Hall B',
    'max_marks': 100,
    'passing_marks': 40,
}


async def audit_rows(db_session):
    return (await db_session.execute(select(AuditLog).order_by(AuditLog.created_at))).scalars().all()


class TestInferAction:

    @pytest.mark.parametrize('method, path, action', [
        ('GET', '/exams', AuditAction.READ),
        ('GET', '/exams/{id}', AuditAction.READ),
        ('POST', '/exams', AuditAction.CREATE),
        ('POST', '/exams/{id}/materials', AuditAction.UPLOAD),
        ('POST', '/fees/{id}/upload-receipt', AuditAction.UPLOAD),
        ('POST', '/thesis/{id}/upload', AuditAction.UPLOAD),
        ('PUT', '/exams/{id}', AuditAction.UPDATE),
        ('PATCH', '/exams/{id}/status', AuditAction.UPDATE),
        ('PATCH', '/leaves/{id}/approve', AuditAction.APPROVE),
        ('PATCH', '/leaves/{id}/reject', AuditAction.REJECT),
        ('DELETE', '/exams/{id}', AuditAction.DELETE),
        ('OPTIONS', '/exams', AuditAction.OTHER),
    ])
    def test_action(self, method, path, action):
        assert infer_action(method, path, 'exam')[0] == action

    def test_descriptions(self):
        assert infer_action('POST', '/exams', 'exam')[1] == 'Created new exam'
        assert infer_action('DELETE', '/exams/{id}', 'exam')[1] == 'Deleted exam'
        # Filled in from the request body
        assert infer_action('PATCH', '/exams/{id}/status', 'exam')[1] is None


class TestAuditedRoutes:

    async def test_successful_create_writes_one_row(self, client: AsyncClient, faculty, faculty_user, headers_for, db_session):
        response = await client.post(
            '/api/v1/exams',
            json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id},
            headers=headers_for(faculty_user),
        )

        assert response.status_code == 201
        exam_id = response.json()['data']['id']

        rows = await audit_rows(db_session)
        assert len(rows) == 1
        assert rows[0].action == AuditAction.CREATE
        assert rows[0].resource == AuditResource.EXAM
        assert rows[0].resource_id == exam_id
        assert rows[0].user_id == faculty_user.id
        assert rows[0].details == {'method': 'POST', 'path': '/api/v1/exams', 'status_code': 201}

    async def test_status_change_description(self, client: AsyncClient, faculty, faculty_user, headers_for, db_session):
        headers = headers_for(faculty_user)
        created = await client.post('/api/v1/exams', json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id}, headers=headers)
        exam_id = created.json()['data']['id']

        response = await client.patch(f'/api/v1/exams/{exam_id}/status', json={'status': 'ongoing'}, headers=headers)

        assert response.status_code == 200
        rows = await audit_rows(db_session)
        assert rows[-1].action == AuditAction.UPDATE
        assert rows[-1].resource_id == exam_id
        assert rows[-1].description == 'exam status updated to ongoing'

    async def test_failed_request_writes_nothing(self, client: AsyncClient, faculty_user, headers_for, db_session):
        response = await client.get('/api/v1/exams/missing', headers=headers_for(faculty_user))

        assert response.status_code == 404
        assert response.json()['code'] == 'EXAM_NOT_FOUND'
        assert await audit_rows(db_session) == []

    async def test_rejected_transition_writes_nothing(self, client: AsyncClient, faculty, faculty_user, headers_for, db_session):
        headers = headers_for(faculty_user)
        created = await client.post('/api/v1/exams', json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id}, headers=headers)
        exam_id = created.json()['data']['id']

        response = await client.patch(f'/api/v1/exams/{exam_id}/status', json={'status': 'completed'}, headers=headers)

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_STATUS_TRANSITION'
        assert len(await audit_rows(db_session)) == 1

    async def test_forbidden_writes_nothing(self, client: AsyncClient, student_user, headers_for, db_session):
        response = await client.post(
            '/api/v1/exams',
            json={**EXAM_PAYLOAD, 'faculty_in_charge_id': 'any'},
            headers=headers_for(student_user),
        )

        assert response.status_code == 403
        assert await audit_rows(db_session) == []

    async def test_upload_to_missing_record_stores_nothing(self, client: AsyncClient, faculty_user, headers_for, files, db_session):
        response = await client.post(
            '/api/v1/exams/missing/materials',
            files=[('files', ('syllabus.pdf', b'%PDF-1.4', 'application/pdf'))],
            headers=headers_for(faculty_user),
        )

        assert response.status_code == 404
        assert files.uploaded == []
        assert await audit_rows(db_session) == []

    async def test_materials_at_full_ceiling_fit_the_request_limit(
        self, client: AsyncClient, faculty, faculty_user, headers_for, files
    ):
        headers = headers_for(faculty_user)
        created = await client.post('/api/v1/exams', json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id}, headers=headers)
        exam_id = created.json()['data']['id']
        chunk = b'x' * EXAM_MATERIALS.max_size

        response = await client.post(
            f'/api/v1/exams/{exam_id}/materials',
            files=[('files', (f'paper-{n}.pdf', chunk, 'application/pdf')) for n in range(EXAM_MATERIALS.max_files)],
            headers=headers,
        )

        assert response.status_code == 200
        assert len(response.json()['data']['attachments']) == EXAM_MATERIALS.max_files
        assert len(files.uploaded) == EXAM_MATERIALS.max_files
        assert int(response.request.headers['content-length']) > EXAM_MATERIALS.max_files * EXAM_MATERIALS.max_size

    @pytest.mark.parametrize('path, code', [
        ('/api/v1/leaves/missing/documents', 'LEAVE_NOT_FOUND'),
        ('/api/v1/grievances/missing/attachments', 'GRIEVANCE_NOT_FOUND'),
        ('/api/v1/admissions/missing/documents', 'ADMISSION_NOT_FOUND'),
    ])
    async def test_documents_for_missing_record_store_nothing(
        self, client: AsyncClient, path, code, admin_user, headers_for, files, db_session
    ):
        response = await client.post(
            path,
            files=[('files', ('letter.pdf', b'%PDF-1.4', 'application/pdf'))],
            headers=headers_for(admin_user),
        )

        assert response.status_code == 404
        assert response.json()['code'] == code
        assert files.uploaded == []
        assert await audit_rows(db_session) == []

    async def test_upload_is_audited_as_upload(self, client: AsyncClient, faculty, faculty_user, headers_for, files, db_session):
        headers = headers_for(faculty_user)
        created = await client.post('/api/v1/exams', json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id}, headers=headers)
        exam_id = created.json()['data']['id']

        response = await client.post(
            f'/api/v1/exams/{exam_id}/materials',
            files=[('files', ('syllabus.pdf', b'%PDF-1.4', 'application/pdf'))],
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()['data']['attachments'] == ['https://files.test/exam-materials/syllabus.pdf']
        rows = await audit_rows(db_session)
        assert rows[-1].action == AuditAction.UPLOAD
        assert rows[-1].resource_id == exam_id

    async def test_disallowed_file_type(self, client: AsyncClient, faculty, faculty_user, headers_for, files):
        headers = headers_for(faculty_user)
        created = await client.post('/api/v1/exams', json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id}, headers=headers)
        exam_id = created.json()['data']['id']

        response = await client.post(
            f'/api/v1/exams/{exam_id}/materials',
            files=[('files', ('script.exe', b'MZ', 'application/octet-stream'))],
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_FILE'
        assert files.uploaded == []


class TestAuditQueries:

    async def test_admin_only(self, client: AsyncClient, faculty_user, headers_for):
        response = await client.get('/api/v1/audit', headers=headers_for(faculty_user))

        assert response.status_code == 403

    async def test_reading_the_trail_is_not_audited(self, client: AsyncClient, admin_user, faculty, faculty_user, headers_for):
        await client.post(
            '/api/v1/exams',
            json={**EXAM_PAYLOAD, 'faculty_in_charge_id': faculty.id},
            headers=headers_for(faculty_user),
        )

        first = await client.get('/api/v1/audit', headers=headers_for(admin_user))
        second = await client.get('/api/v1/audit/resource/exam', headers=headers_for(admin_user))

        assert first.status_code == 200
        assert first.json()['data']['total'] == 1
        assert second.json()['data']['items'][0]['action'] == 'create'
        assert second.json()['data']['total'] == 1
