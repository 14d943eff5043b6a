"""
Unit Tests for Health Check Endpoints
"""
from httpx import AsyncClient
from sqlalchemy import select

from unirecords.models.audit_log import AuditAction, AuditLog, AuditResource


class TestHealth:

    async def test_all_services_up(self, client: AsyncClient, db_session):
        response = await client.get('/health')

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'healthy'
        assert set(body['services']) == {'database', 'cache', 'email', 'storage'}
        assert all(check['status'] == 'up' for check in body['services'].values())

        rows = (await db_session.execute(select(AuditLog))).scalars().all()
        assert len(rows) == 1
        assert rows[0].action == AuditAction.READ
        assert rows[0].resource == AuditResource.SYSTEM

    async def test_storage_down_is_unhealthy(self, client: AsyncClient, files):
        files.reachable = False

        response = await client.get('/health')

        assert response.status_code == 503
        body = response.json()
        assert body['status'] == 'unhealthy'
        assert body['services']['storage']['status'] == 'down'

    async def test_email_not_configured_is_unhealthy(self, client: AsyncClient, notifier):
        notifier.is_configured = False

        response = await client.get('/health')

        assert response.status_code == 503
        assert response.json()['services']['email']['status'] == 'down'

    async def test_cache_is_optional(self, client: AsyncClient, cache):
        cache.enabled = False

        response = await client.get('/health')

        assert response.status_code == 200
        assert response.json()['services']['cache'] == {'status': 'up', 'message': 'disabled'}

    async def test_liveness(self, client: AsyncClient):
        response = await client.get('/health/live')

        assert response.status_code == 200
        assert response.json()['status'] == 'alive'
