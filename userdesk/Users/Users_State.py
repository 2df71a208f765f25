# Users_State.py
# Description: State containers, outcomes and local errors for the users sync controller
#
# Imports
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, FrozenSet
#
# Local Imports
from ..users_api.exceptions import UsersAPIError, MutationError
from ..users_api.schemas import UserRecord
#
########################################################################################################################
#
# Functions:

class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class MutationKind(str, Enum):
    EDIT = "edit"
    DELETE = "delete"


class MutationState(str, Enum):
    NONE = "none"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


# --- Local (synchronous) rejections ---
class UsersSyncError(Exception):
    """Base exception for rejections raised by the sync controller itself."""
    def __init__(self, message: str, target_id: Optional[int] = None):
        super().__init__(message)
        self.target_id = target_id


class ConflictError(UsersSyncError):
    """Raised when a mutation is requested for a user that already has one in flight."""
    pass


class NotFoundError(UsersSyncError):
    """Raised when the mutation target is not on the currently loaded page."""
    pass


@dataclass
class PageState:
    records: Tuple[UserRecord, ...] = ()
    current_page: int = 1
    total_pages: int = 1
    loading: bool = False
    last_error: Optional[UsersAPIError] = None
    per_page: int = 0
    total: int = 0

    def index_of(self, user_id: int) -> Optional[int]:
        for index, record in enumerate(self.records):
            if record.id == user_id:
                return index
        return None


@dataclass(frozen=True)
class PendingMutation:
    target_id: int
    kind: MutationKind
    snapshot: UserRecord
    index: int
    page_generation: int


@dataclass(frozen=True)
class MutationOutcome:
    target_id: int
    kind: MutationKind
    state: MutationState
    error: Optional[MutationError] = None

    @property
    def committed(self) -> bool:
        return self.state is MutationState.COMMITTED


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str


@dataclass(frozen=True)
class UsersViewSnapshot:
    """Read-only copy of the controller state handed to the presentation layer."""
    records: Tuple[UserRecord, ...]
    filtered_records: Tuple[UserRecord, ...]
    search_text: str
    current_page: int
    total_pages: int
    loading: bool
    load_state: LoadState
    last_error: Optional[UsersAPIError] = None
    pending_ids: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

#
# End of Users_State.py
########################################################################################################################
