"""
Dependency health checks.

Each check returns {"status": "up"|"down", "message": ...} and never raises.
The cache is optional: a disabled cache reports "up" with message "disabled".
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Tuple

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from unirecords.core.logging_config import logger
from unirecords.core.redis_client import RedisClient
from unirecords.services.email_service import EmailService
from unirecords.services.storage_service import StorageService

UP = "up"
DOWN = "down"

# Services that must be up for the API to report healthy
REQUIRED_SERVICES = ("database", "email", "storage")


def _result(ok: bool, message: str) -> Dict[str, str]:
    return {"status": UP if ok else DOWN, "message": message}


class HealthService:
    def __init__(self, db: AsyncSession, files: StorageService, notifier: EmailService, cache: RedisClient):
        self.db = db
        self.files = files
        self.notifier = notifier
        self.cache = cache

    async def check_database(self) -> Dict[str, str]:
        try:
            await self.db.execute(text("SELECT 1"))
            return _result(True, "Database connection successful")
        except Exception as e:
            logger.error(f"[HealthCheck] Database check failed: {e}")
            return _result(False, f"Database connection failed: {e}")

    async def check_cache(self) -> Dict[str, str]:
        if not self.cache.enabled:
            return _result(True, "disabled")
        try:
            ok = await self.cache.ping()
            return _result(ok, "Redis connection successful" if ok else "Redis did not answer ping")
        except Exception as e:
            logger.warning(f"[HealthCheck] Redis check failed: {e}")
            return _result(False, f"Redis connection failed: {e}")

    async def check_email(self) -> Dict[str, str]:
        if self.notifier.is_configured:
            return _result(True, f"{self.notifier.provider} configured")
        return _result(False, "Email not configured")

    async def check_storage(self) -> Dict[str, str]:
        try:
            await self.files.ping()
            return _result(True, f"Bucket '{self.files.bucket_name}' reachable")
        except Exception as e:
            logger.warning(f"[HealthCheck] Storage check failed: {e}")
            return _result(False, f"Storage check failed: {e}")

    async def check_all(self) -> Tuple[bool, Dict[str, Any]]:
        """Run every check concurrently; healthy when all required services are up"""
        database, cache, email, storage = await asyncio.gather(
            self.check_database(),
            self.check_cache(),
            self.check_email(),
            self.check_storage(),
        )
        services = {"database": database, "cache": cache, "email": email, "storage": storage}
        healthy = all(services[name]["status"] == UP for name in REQUIRED_SERVICES)

        return healthy, {
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.utcnow().isoformat(),
            "services": services,
        }
