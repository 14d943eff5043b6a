"""
Unit Tests for HTTP middleware
"""
import logging

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from unirecords.core.config import settings
from unirecords.core.middleware import RequestSizeLimitMiddleware, status_log_level
from unirecords.utils import uploads


class TestRequestLogging:

    async def test_request_id_is_generated(self, client: AsyncClient):
        response = await client.get('/health/live')

        assert response.headers['X-Request-ID']
        assert response.headers['X-Response-Time'].endswith('ms')

    async def test_request_id_is_propagated(self, client: AsyncClient):
        response = await client.get('/health/live', headers={'X-Request-ID': 'trace-42'})

        assert response.headers['X-Request-ID'] == 'trace-42'

    @pytest.mark.parametrize('status_code, level', [
        (200, logging.INFO),
        (404, logging.WARNING),
        (503, logging.ERROR),
    ])
    def test_level_follows_status(self, status_code, level):
        assert status_log_level(status_code) == level


class TestSecurityHeaders:

    async def test_api_responses_are_not_cached(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')

        assert response.status_code == 401
        assert response.headers['Cache-Control'] == 'no-store'
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'


class TestRequestSizeLimit:

    @pytest.fixture
    def small_app(self):
        async def echo(request):
            return PlainTextResponse((await request.body()).decode())

        app = Starlette(routes=[Route('/echo', echo, methods=['POST'])])
        app.add_middleware(RequestSizeLimitMiddleware, max_size=16)
        return app

    async def test_within_limit(self, small_app):
        async with AsyncClient(transport=ASGITransport(app=small_app), base_url='http://test') as ac:
            response = await ac.post('/echo', content=b'short body')

        assert response.status_code == 200
        assert response.text == 'short body'

    async def test_over_limit(self, small_app):
        async with AsyncClient(transport=ASGITransport(app=small_app), base_url='http://test') as ac:
            response = await ac.post('/echo', content=b'x' * 64)

        assert response.status_code == 413
        assert response.json()['code'] == 'REQUEST_TOO_LARGE'

    def test_global_cap_leaves_room_for_every_upload_route(self):
        policies = [value for value in vars(uploads).values() if isinstance(value, uploads.UploadPolicy)]
        largest = max(policy.max_files * policy.max_size for policy in policies)

        assert len(policies) == 6
        assert settings.MAX_REQUEST_SIZE > largest
