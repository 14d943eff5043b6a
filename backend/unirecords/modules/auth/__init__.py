# Authentication module

from unirecords.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    require_roles,
)

__all__ = [
    "get_current_user",
    "get_current_admin",
    "require_roles",
]
