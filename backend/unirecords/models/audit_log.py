from sqlalchemy import Column, String, DateTime, Text, Enum as SQLEnum
from datetime import datetime
import enum

from unirecords.core.database import Base
from unirecords.core.types import GUID, JSONType, generate_uuid


class AuditAction(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    FAILED_LOGIN = "failed_login"
    EXPORT = "export"
    IMPORT = "import"
    APPROVE = "approve"
    REJECT = "reject"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    OTHER = "other"


class AuditResource(str, enum.Enum):
    USER = "user"
    STUDENT = "student"
    FACULTY = "faculty"
    THESIS = "thesis"
    FEE = "fee"
    ADMISSION = "admission"
    GRIEVANCE = "grievance"
    LEAVE = "leave"
    EXAM = "exam"
    SYSTEM = "system"
    OTHER = "other"


class AuditLog(Base):
    """Append-only record of who did what to which resource"""
    __tablename__ = "audit_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    action = Column(SQLEnum(AuditAction), default=AuditAction.OTHER, nullable=False, index=True)
    resource = Column(SQLEnum(AuditResource), default=AuditResource.OTHER, nullable=False, index=True)
    resource_id = Column(String(64), nullable=True, index=True)
    description = Column(Text, nullable=True)
    details = Column(JSONType, nullable=True)

    # No FK: entries outlive the users they mention
    user_id = Column(GUID, nullable=True, index=True)

    # Request metadata
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} {self.resource} by {self.user_id}>"
