# Users_Sync.py
# Description: Owns the loaded page of users, keeps it in step with the remote store and applies
#              edits/deletes optimistically with rollback when the remote call fails.
#
# Imports
import asyncio
from typing import Any, Callable, Dict, List, Optional, Protocol, Set, Tuple, Union
#
# 3rd-Party Imports
from loguru import logger
#
# Local Imports
from ..Constants import (
    FIRST_PAGE, TITLE_SUCCESS, TITLE_ERROR, MSG_PAGE_LOADED, MSG_FETCH_FAILED,
    MSG_USER_UPDATED, MSG_UPDATE_FAILED, MSG_USER_DELETED, MSG_DELETE_FAILED,
)
from ..users_api.exceptions import FailureReason, UsersAPIError, FetchError, MutationError
from ..users_api.schemas import UserRecord, UserPatch, UsersPage
from .Users_Filter import filter_users
from .Users_State import (
    LoadState, MutationKind, MutationState, NotificationKind, UsersSyncError, ConflictError,
    NotFoundError, PageState, PendingMutation, MutationOutcome, Notification, UsersViewSnapshot,
)
#
########################################################################################################################
#
# Functions:

StateListener = Callable[[UsersViewSnapshot], Any]
NotificationListener = Callable[[Notification], Any]


class UsersStore(Protocol):
    async def fetch_page(self, page: int) -> UsersPage: ...

    async def update_user(self, user_id: int, patch: UserPatch) -> None: ...

    async def delete_user(self, user_id: int) -> None: ...

    async def close(self) -> None: ...


def _failure_message(fallback: str, error: UsersAPIError) -> str:
    if not error.message or error.message.startswith(fallback):
        return error.message or fallback
    return f"{fallback}: {error.message}"


def _wrap_unexpected(error_cls, error: Exception) -> UsersAPIError:
    return error_cls(FailureReason.CLIENT_ERROR, f"{type(error).__name__}: {error}")


class UsersSyncController:
    """
    Holds exactly one page of users fetched from a UsersStore plus the search-filtered view of it.

    Page loads are async; a response for a page request that has since been superseded by a
    newer set_page() call is dropped on arrival. Edits and deletes are applied to the local page
    immediately and run against the store as background tasks; a failed call puts the record
    back the way it was. Only one mutation per user id may be in flight.

    The presentation layer reads state through snapshot() / subscribe() and receives
    user-facing messages through add_notification_listener().
    """

    def __init__(self, store: UsersStore, close_store: bool = True):
        self.store = store
        self.close_store = close_store
        self._state = PageState()
        self._load_state = LoadState.IDLE
        self._search_text = ""
        self._filtered: Tuple[UserRecord, ...] = ()
        # Bumped by every set_page() call; responses carrying an older value are stale.
        self._fetch_generation = 0
        # Bumped whenever a page replaces the records wholesale.
        self._page_generation = 0
        self._page_order: Dict[int, int] = {}
        self._pending: Dict[int, PendingMutation] = {}
        self._mutation_states: Dict[int, MutationState] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._state_listeners: List[StateListener] = []
        self._notification_listeners: List[NotificationListener] = []
        self._disposed = False

    # --- Read access ---

    @property
    def records(self) -> Tuple[UserRecord, ...]:
        return self._state.records

    @property
    def filtered_records(self) -> Tuple[UserRecord, ...]:
        return self._filtered

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @property
    def total_pages(self) -> int:
        return self._state.total_pages

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def last_error(self) -> Optional[UsersAPIError]:
        return self._state.last_error

    @property
    def pending_ids(self) -> frozenset:
        return frozenset(self._pending)

    def pending_mutation(self, user_id: int) -> Optional[PendingMutation]:
        return self._pending.get(user_id)

    def mutation_state(self, user_id: int) -> MutationState:
        return self._mutation_states.get(user_id, MutationState.NONE)

    def snapshot(self) -> UsersViewSnapshot:
        return UsersViewSnapshot(
            records=self._state.records,
            filtered_records=self._filtered,
            search_text=self._search_text,
            current_page=self._state.current_page,
            total_pages=self._state.total_pages,
            loading=self._state.loading,
            load_state=self._load_state,
            last_error=self._state.last_error,
            pending_ids=frozenset(self._pending),
        )

    # --- Listeners ---

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Registers `listener` for state changes. Returns a callable that unsubscribes it."""
        self._state_listeners.append(listener)
        return lambda: self._remove_listener(self._state_listeners, listener)

    def add_notification_listener(self, listener: NotificationListener) -> Callable[[], None]:
        self._notification_listeners.append(listener)
        return lambda: self._remove_listener(self._notification_listeners, listener)

    @staticmethod
    def _remove_listener(listeners: list, listener) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _emit_state(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._state_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"State listener {listener!r} raised; continuing.")

    def _notify(self, kind: NotificationKind, title: str, message: str) -> None:
        notification = Notification(kind=kind, title=title, message=message)
        logger.debug(f"Notification [{title}]: {message}")
        for listener in list(self._notification_listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception(f"Notification listener {listener!r} raised; continuing.")

    # --- Paging ---

    async def load(self) -> bool:
        return await self.set_page(FIRST_PAGE)

    async def refresh(self) -> bool:
        return await self.set_page(self._state.current_page)

    async def next_page(self) -> bool:
        target = min(self._state.current_page + 1, self._state.total_pages)
        if target == self._state.current_page:
            return False
        return await self.set_page(target)

    async def previous_page(self) -> bool:
        target = max(self._state.current_page - 1, FIRST_PAGE)
        if target == self._state.current_page:
            return False
        return await self.set_page(target)

    async def set_page(self, page: int) -> bool:
        """
        Fetches `page` and, if no newer set_page() call was made in the meantime, replaces the
        loaded page with it. Out-of-range pages are ignored.

        Returns:
            True if the fetched page became the current page.
        """
        self._ensure_active()
        if isinstance(page, bool) or not isinstance(page, int) or not FIRST_PAGE <= page <= self._state.total_pages:
            logger.debug(f"set_page({page!r}) ignored: outside 1..{self._state.total_pages}")
            return False

        self._fetch_generation += 1
        generation = self._fetch_generation
        self._state.loading = True
        self._load_state = LoadState.LOADING
        logger.debug(f"Fetching users page {page} (request #{generation})")
        self._emit_state()

        try:
            page_data = await self.store.fetch_page(page)
        except Exception as e:
            if not isinstance(e, FetchError):
                logger.exception(f"Unexpected error while fetching users page {page}")
                e = _wrap_unexpected(FetchError, e)
            if generation != self._fetch_generation or self._disposed:
                logger.debug(f"Ignoring failure of superseded request #{generation} for page {page}: {e}")
                return False
            # Keep the last good records on screen.
            self._state.loading = False
            self._state.last_error = e
            self._load_state = LoadState.FAILED
            logger.error(f"Failed to fetch users page {page}: {e}")
            self._emit_state()
            self._notify(NotificationKind.ERROR, TITLE_ERROR, _failure_message(MSG_FETCH_FAILED, e))
            return False

        if generation != self._fetch_generation or self._disposed:
            logger.info(f"Discarding stale response for page {page} (request #{generation}, "
                        f"latest #{self._fetch_generation})")
            return False

        self._replace_page(page, page_data)
        self._notify(NotificationKind.SUCCESS, TITLE_SUCCESS,
                     MSG_PAGE_LOADED.format(page=self._state.current_page, total_pages=self._state.total_pages))
        return True

    def _replace_page(self, page: int, page_data: UsersPage) -> None:
        records = tuple(page_data.data)
        total_pages = page_data.total_pages
        if total_pages < 1:
            logger.warning(f"Remote reported total_pages={total_pages} for page {page}; treating as one empty page.")
            total_pages = 1
            records = ()

        self._page_generation += 1
        self._page_order = {record.id: position for position, record in enumerate(records)}
        self._state = PageState(
            records=records,
            current_page=page,
            total_pages=total_pages,
            loading=False,
            last_error=None,
            per_page=page_data.per_page,
            total=page_data.total,
        )
        self._load_state = LoadState.LOADED
        logger.info(f"Loaded users page {page}/{total_pages} with {len(records)} record(s)")
        self._recompute_view()
        self._emit_state()

    # --- Search ---

    def set_search_query(self, text: Optional[str]) -> Tuple[UserRecord, ...]:
        self._ensure_active()
        self._search_text = text or ""
        self._recompute_view()
        self._emit_state()
        return self._filtered

    def _recompute_view(self) -> None:
        # Always recomputed, including for an empty page.
        self._filtered = tuple(filter_users(self._state.records, self._search_text))

    # --- Mutations ---

    def begin_edit(self, user_id: int, patch: Union[UserPatch, Dict[str, Any]]) -> "asyncio.Task[MutationOutcome]":
        """
        Applies `patch` to the loaded record right away and sends the update in the background.

        Raises:
            ConflictError: A mutation for `user_id` is still pending.
            NotFoundError: `user_id` is not on the loaded page.

        Returns:
            A task resolving to the MutationOutcome; remote failures are reported through it
            rather than raised.
        """
        loop = asyncio.get_running_loop()
        self._ensure_active()
        if isinstance(patch, dict):
            patch = UserPatch(**patch)
        index = self._claim_target(user_id, MutationKind.EDIT)

        snapshot = self._state.records[index]
        pending = PendingMutation(target_id=user_id, kind=MutationKind.EDIT, snapshot=snapshot,
                                  index=index, page_generation=self._page_generation)
        optimistic = snapshot.model_copy(update=patch.to_payload())
        self._set_record(index, optimistic)
        self._mark_pending(pending)
        logger.debug(f"Optimistically edited user {user_id}: {patch.to_payload()}")

        request = UserPatch(first_name=optimistic.first_name, last_name=optimistic.last_name, email=optimistic.email)
        return self._spawn(loop, self._run_edit(pending, request), f"edit-user-{user_id}")

    def begin_delete(self, user_id: int) -> "asyncio.Task[MutationOutcome]":
        """
        Removes the record from the loaded page right away and sends the delete in the background.
        Raises ConflictError / NotFoundError like begin_edit().
        """
        loop = asyncio.get_running_loop()
        self._ensure_active()
        index = self._claim_target(user_id, MutationKind.DELETE)

        snapshot = self._state.records[index]
        pending = PendingMutation(target_id=user_id, kind=MutationKind.DELETE, snapshot=snapshot,
                                  index=index, page_generation=self._page_generation)
        records = list(self._state.records)
        del records[index]
        self._state.records = tuple(records)
        self._mark_pending(pending)
        logger.debug(f"Optimistically removed user {user_id} from index {index}")

        return self._spawn(loop, self._run_delete(pending), f"delete-user-{user_id}")

    def _claim_target(self, user_id: int, kind: MutationKind) -> int:
        if user_id in self._pending:
            in_flight = self._pending[user_id].kind.value
            logger.warning(f"Rejected {kind.value} of user {user_id}: {in_flight} still pending")
            raise ConflictError(f"A {in_flight} of user {user_id} is still pending.", target_id=user_id)
        index = self._state.index_of(user_id)
        if index is None:
            logger.warning(f"Rejected {kind.value} of user {user_id}: not on page {self._state.current_page}")
            raise NotFoundError(f"User {user_id} is not on the loaded page.", target_id=user_id)
        return index

    def _mark_pending(self, pending: PendingMutation) -> None:
        self._pending[pending.target_id] = pending
        self._mutation_states[pending.target_id] = MutationState.PENDING
        self._recompute_view()
        self._emit_state()

    def _spawn(self, loop: asyncio.AbstractEventLoop, coro, name: str) -> "asyncio.Task[MutationOutcome]":
        task = loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_edit(self, pending: PendingMutation, request: UserPatch) -> MutationOutcome:
        try:
            await self.store.update_user(pending.target_id, request)
        except Exception as e:
            if not isinstance(e, MutationError):
                logger.exception(f"Unexpected error during {pending.kind.value} of user {pending.target_id}")
                e = _wrap_unexpected(MutationError, e)
            self._rollback(pending)
            self._notify(NotificationKind.ERROR, TITLE_ERROR, _failure_message(MSG_UPDATE_FAILED, e))
            return MutationOutcome(pending.target_id, pending.kind, MutationState.ROLLED_BACK, e)
        except asyncio.CancelledError:
            self._rollback(pending)
            raise
        self._commit(pending)
        self._notify(NotificationKind.SUCCESS, TITLE_SUCCESS, MSG_USER_UPDATED)
        return MutationOutcome(pending.target_id, pending.kind, MutationState.COMMITTED)

    async def _run_delete(self, pending: PendingMutation) -> MutationOutcome:
        try:
            await self.store.delete_user(pending.target_id)
        except Exception as e:
            if not isinstance(e, MutationError):
                logger.exception(f"Unexpected error during {pending.kind.value} of user {pending.target_id}")
                e = _wrap_unexpected(MutationError, e)
            self._rollback(pending)
            self._notify(NotificationKind.ERROR, TITLE_ERROR, _failure_message(MSG_DELETE_FAILED, e))
            return MutationOutcome(pending.target_id, pending.kind, MutationState.ROLLED_BACK, e)
        except asyncio.CancelledError:
            self._rollback(pending)
            raise
        self._commit(pending)
        self._notify(NotificationKind.SUCCESS, TITLE_SUCCESS, MSG_USER_DELETED)
        return MutationOutcome(pending.target_id, pending.kind, MutationState.COMMITTED)

    def _commit(self, pending: PendingMutation) -> None:
        self._pending.pop(pending.target_id, None)
        self._mutation_states[pending.target_id] = MutationState.COMMITTED
        logger.info(f"{pending.kind.value.capitalize()} of user {pending.target_id} committed")
        if not self._disposed:
            self._emit_state()

    def _rollback(self, pending: PendingMutation) -> None:
        self._pending.pop(pending.target_id, None)
        self._mutation_states[pending.target_id] = MutationState.ROLLED_BACK
        if self._disposed:
            return
        if pending.page_generation != self._page_generation:
            # A different page is loaded now; its records come straight from the server.
            logger.warning(f"{pending.kind.value.capitalize()} of user {pending.target_id} failed after the page "
                           f"changed; nothing to revert locally")
        elif pending.kind is MutationKind.EDIT:
            index = self._state.index_of(pending.target_id)
            if index is not None:
                self._set_record(index, pending.snapshot)
            logger.info(f"Reverted edit of user {pending.target_id}")
        else:
            if self._state.index_of(pending.target_id) is None:
                records = list(self._state.records)
                index = self._restore_position(pending, records)
                records.insert(index, pending.snapshot)
                self._state.records = tuple(records)
                logger.info(f"Restored user {pending.target_id} at index {index}")
        self._recompute_view()
        self._emit_state()

    def _restore_position(self, pending: PendingMutation, records: List[UserRecord]) -> int:
        """Index that puts the record back in server order among the records still present."""
        position = self._page_order.get(pending.target_id)
        if position is None:
            return min(pending.index, len(records))
        return sum(1 for record in records if self._page_order.get(record.id, position + 1) < position)

    def _set_record(self, index: int, record: UserRecord) -> None:
        records = list(self._state.records)
        records[index] = record
        self._state.records = tuple(records)

    # --- Lifecycle ---

    async def wait_for_pending(self) -> None:
        """Waits until every mutation task started so far has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def dispose(self) -> None:
        if self._disposed:
            return
        await self.wait_for_pending()
        self._disposed = True
        self._state_listeners.clear()
        self._notification_listeners.clear()
        self._state = PageState()
        self._filtered = ()
        self._page_order = {}
        self._pending.clear()
        if self.close_store:
            await self.store.close()
        logger.debug("UsersSyncController disposed")

    def _ensure_active(self) -> None:
        if self._disposed:
            raise UsersSyncError("UsersSyncController has been disposed.")

#
# End of Users_Sync.py
########################################################################################################################
