from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime

from unirecords.models.audit_log import AuditAction, AuditResource


class AuditLogResponse(BaseModel):
    id: str
    action: AuditAction
    resource: AuditResource
    resource_id: Optional[str] = None
    description: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
