# userdesk/users_api/__init__.py
from .client import UsersAPIClient
from .auth import TokenProvider, StaticTokenProvider, ConfigTokenProvider
from .exceptions import (
    FailureReason, UsersAPIError, FetchError, MutationError
)
from .schemas import UserRecord, UserPatch, UsersPage

__all__ = [
    "UsersAPIClient",
    "TokenProvider", "StaticTokenProvider", "ConfigTokenProvider",
    "FailureReason", "UsersAPIError", "FetchError", "MutationError",
    "UserRecord", "UserPatch", "UsersPage",
]
