# userdesk/Users/__init__.py
from .Users_Filter import filter_users, matches_query
from .Users_State import (
    LoadState, MutationKind, MutationState, NotificationKind,
    UsersSyncError, ConflictError, NotFoundError,
    PageState, PendingMutation, MutationOutcome, Notification, UsersViewSnapshot,
)
from .Users_Sync import UsersSyncController, UsersStore

__all__ = [
    "filter_users", "matches_query",
    "LoadState", "MutationKind", "MutationState", "NotificationKind",
    "UsersSyncError", "ConflictError", "NotFoundError",
    "PageState", "PendingMutation", "MutationOutcome", "Notification", "UsersViewSnapshot",
    "UsersSyncController", "UsersStore",
]
