"""
Admission pipeline through the HTTP API, from public application to enrollment
"""
import pytest
from httpx import AsyncClient

from unirecords.services.email_service import NotificationEvent

pytestmark = pytest.mark.integration

APPLICATION = {
    'program': 'B.Tech',
    'department': 'Electrical',
    'entrance_exam_score': 88,
    'personal_details': {
        'first_name': 'Nisha',
        'last_name': 'Kapoor',
        'email': 'nisha.kapoor@example.com',
        'phone': '9123456780',
        'date_of_birth': '2006-02-20',
        'gender': 'female',
        'address': {
            'street': '7 Park Street',
            'city': 'Kolkata',
            'state': 'West Bengal',
            'postal_code': '700016',
            'country': 'India',
        },
    },
}


class TestAdmissionFlow:

    async def test_application_to_enrollment(self, client: AsyncClient, admin_user, headers_for, files, notifier):
        admin = headers_for(admin_user)

        submitted = await client.post('/api/v1/admissions', json=APPLICATION)
        assert submitted.status_code == 201
        admission_id = submitted.json()['data']['id']

        documents = await client.post(
            f'/api/v1/admissions/{admission_id}/documents',
            files=[('files', ('transcript.pdf', b'%PDF-1.4', 'application/pdf'))],
        )
        assert documents.status_code == 200
        assert documents.json()['data']['status'] == 'document_verification'
        assert files.uploaded == ['admissions/transcript.pdf']

        too_early = await client.post(f'/api/v1/admissions/{admission_id}/enroll', headers=admin)
        assert too_early.status_code == 400

        interview = await client.patch(f'/api/v1/admissions/{admission_id}/interview', json={
            'interview_date': '2025-07-01T10:00:00Z',
            'interview_panel': ['Dr. Rao', 'Prof. Singh'],
        }, headers=admin)
        assert interview.json()['data']['status'] == 'interview_scheduled'

        results = await client.patch(f'/api/v1/admissions/{admission_id}/interview-results', json={
            'approved': True,
            'interview_notes': 'Excellent fundamentals',
        }, headers=admin)
        assert results.json()['data']['status'] == 'approved'

        enrolled = await client.post(f'/api/v1/admissions/{admission_id}/enroll', headers=admin)
        assert enrolled.status_code == 200
        enrollment = enrolled.json()['data']
        assert enrollment['admission']['status'] == 'enrolled'
        assert enrollment['registration_number'][4:7] == 'ELE'
        assert notifier.events()[-1] == NotificationEvent.ENROLLMENT

        password = notifier.sent[-1][2]['password']
        login = await client.post('/api/v1/auth/login', json={
            'email': 'nisha.kapoor@example.com',
            'password': password,
        })
        assert login.status_code == 200
        assert login.json()['data']['user']['role'] == 'student'

    async def test_staff_cannot_enroll(self, client: AsyncClient, staff_user, headers_for):
        submitted = await client.post('/api/v1/admissions', json=APPLICATION)
        admission_id = submitted.json()['data']['id']

        response = await client.post(f'/api/v1/admissions/{admission_id}/enroll', headers=headers_for(staff_user))

        assert response.status_code == 403
