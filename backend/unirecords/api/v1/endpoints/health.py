"""
Health Check Endpoints

- /health       - Dependency checks (database, cache, email, storage)
- /health/live  - Basic liveness (app is running)
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from datetime import datetime

from unirecords.api.v1.deps import get_health_service
from unirecords.core.config import settings
from unirecords.models.audit_log import AuditAction, AuditResource
from unirecords.services.audit_service import record_request_audit
from unirecords.services.health_service import HealthService

router = APIRouter(prefix="/health", tags=["Health Checks"])


@router.get("")
async def health_check(
    request: Request,
    service: HealthService = Depends(get_health_service),
):
    """200 when database, email and storage are up; 503 otherwise"""
    healthy, report = await service.check_all()

    await record_request_audit(
        request,
        AuditAction.READ,
        AuditResource.SYSTEM,
        description=f"Health check: {report['status']}",
        details={name: check["status"] for name, check in report["services"].items()},
    )
    return JSONResponse(status_code=200 if healthy else 503, content=report)


@router.get("/live")
async def liveness_check():
    """Basic liveness probe: the process is running and serving requests"""
    return {
        "status": "alive",
        "app_name": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat(),
    }
