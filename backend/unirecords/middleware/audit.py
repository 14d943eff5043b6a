"""
Audit trail for whole routers.

    router = APIRouter(route_class=audited_route(AuditResource.EXAM))

Each route of the router works out its audit action when it is registered
(from the HTTP method and path). After the handler returns a 2xx response
one AuditLog row is written in its own session. Handler exceptions go on to
the exception handlers untouched and are not audited.
"""

import json
from typing import Any, Callable, Coroutine, Optional, Tuple, Type

from fastapi import Request, Response
from fastapi.routing import APIRoute

from unirecords.core.logging_config import logger
from unirecords.models.audit_log import AuditAction, AuditResource
from unirecords.services.audit_service import record_request_audit

UPLOAD_SEGMENTS = frozenset({"upload", "documents", "materials", "attachments", "upload-receipt"})


def infer_action(method: str, path: str, resource: str) -> Tuple[AuditAction, Optional[str]]:
    """
    Map a route to (action, description).

    The description is None for PATCH .../status routes: it depends on the
    request body and is filled in per request.
    """
    method = method.upper()
    segments = [s for s in path.strip("/").split("/") if s]
    last = segments[-1] if segments else ""

    if method == "GET":
        return AuditAction.READ, f"Viewed {resource}"
    if method == "POST":
        if last in UPLOAD_SEGMENTS:
            return AuditAction.UPLOAD, f"Uploaded document for {resource}"
        return AuditAction.CREATE, f"Created new {resource}"
    if method == "PUT":
        return AuditAction.UPDATE, f"Updated {resource}"
    if method == "PATCH":
        if "approve" in path:
            return AuditAction.APPROVE, f"Approved {resource}"
        if "reject" in path:
            return AuditAction.REJECT, f"Rejected {resource}"
        if path.rstrip("/").endswith("status"):
            return AuditAction.UPDATE, None
        return AuditAction.UPDATE, f"Updated {resource}"
    if method == "DELETE":
        return AuditAction.DELETE, f"Deleted {resource}"
    return AuditAction.OTHER, f"Accessed {resource}"


async def _status_description(request: Request, resource: str) -> str:
    new_status = None
    try:
        body = await request.json()
        if isinstance(body, dict):
            new_status = body.get("status")
    except ValueError:
        pass
    return f"{resource} status updated to {new_status or 'new status'}"


def _id_from_response(response: Response) -> Optional[str]:
    body = getattr(response, "body", None)
    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    data = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(data, dict) and data.get("id"):
        return str(data["id"])
    return None


def audited_route(resource: AuditResource) -> Type[APIRoute]:
    """Build an APIRoute subclass that audits every route it is used for"""

    class AuditedRoute(APIRoute):
        audit_resource = resource

        def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any):
            super().__init__(path, endpoint, **kwargs)
            method = next(iter(sorted(self.methods or {"GET"})))
            self.audit_action, self.audit_description = infer_action(method, self.path_format, resource.value)

        def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
            handler = super().get_route_handler()

            async def audited_handler(request: Request) -> Response:
                response = await handler(request)
                if 200 <= response.status_code < 300:
                    await self._record(request, response)
                return response

            return audited_handler

        async def _record(self, request: Request, response: Response) -> None:
            description = self.audit_description
            if description is None:
                description = await _status_description(request, resource.value)

            resource_id = request.path_params.get("id")
            if resource_id is None and self.audit_action == AuditAction.CREATE:
                resource_id = _id_from_response(response)

            logger.debug(f"[Audit] {self.audit_action.value} {resource.value} {resource_id or ''}")
            await record_request_audit(
                request,
                action=self.audit_action,
                resource=resource,
                resource_id=resource_id,
                description=description,
                details={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                },
            )

    AuditedRoute.__name__ = f"Audited{resource.name.title()}Route"
    return AuditedRoute
