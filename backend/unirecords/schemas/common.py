from pydantic import AfterValidator, BaseModel
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional

from unirecords.models.user import UserRole


class UserSummary(BaseModel):
    """Public-facing slice of a User, nested in other responses"""
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    contact_number: Optional[str] = None

    class Config:
        from_attributes = True


class PartialUpdate(BaseModel):
    """Base for typed partial updates: unknown fields are rejected"""

    class Config:
        extra = "forbid"

    def changes(self, allowed) -> Dict[str, Any]:
        """Non-null fields the caller actually sent, restricted to the allow-list"""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True, exclude_none=True).items()
            if field in allowed
        }


def success_response(message: str, data: Any = None, results: Optional[int] = None) -> Dict[str, Any]:
    """Standard `{status, message, data?, results?}` envelope"""
    body: Dict[str, Any] = {"status": "success", "message": message}
    if results is not None:
        body["results"] = results
    if data is not None:
        body["data"] = data
    return body


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; convert aware input before comparing"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(naive_utc)]
