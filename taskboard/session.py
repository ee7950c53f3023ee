"""
Board session: ties the command layer to the persistent store.

A BoardSession holds the hydrated AppState plus the session-only filter
and selection state. ``dispatch`` runs a command, persists the keys that
changed, and notifies subscribers:

    toast          (notification)   a command produced a user-facing message
    state_changed  (state, keys)    an applied command changed persisted keys
    rejected       (notification)   a command was refused
"""
import logging
from typing import Callable, Dict, List, Optional

from . import commands, views
from .commands import CommandResult, Outcome
from .config import Config
from .state import AppState, FilterState, SelectionState
from .store import KeyValueStore, load_state, save_state

logger = logging.getLogger(__name__)


class BoardSession:
    """Stateful front for one board."""

    def __init__(self, store: KeyValueStore, config: Optional[Config] = None):
        self.store = store
        self.config = config or Config()
        self.state: AppState = load_state(store, self.config.storage_version)
        self.filters = FilterState()
        self.selection = SelectionState()
        self.subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        self.subscribers.setdefault(event_type, []).append(callback)

    def _emit(self, event_type: str, **kwargs) -> None:
        for callback in self.subscribers.get(event_type, []):
            try:
                callback(**kwargs)
            except Exception:
                logger.exception("Error in %s callback", event_type)

    def dispatch(self, command: Callable[..., CommandResult], *args, **kwargs) -> CommandResult:
        """
        Apply ``command(self.state, *args, **kwargs)``.

        Bulk commands read the current selection; pass it explicitly or let
        the session supply it.
        """
        if command in (commands.bulk_delete, commands.bulk_archive,
                       commands.bulk_favorite, commands.bulk_move) and not (
                args and isinstance(args[0], SelectionState)):
            args = (self.selection,) + args

        previous = self.state
        result = command(previous, *args, **kwargs)

        if result.outcome == Outcome.APPLIED:
            self.state = result.state
            if result.selection is not None:
                self.selection = result.selection
            written = save_state(self.store, self.state, previous)
            if written:
                self._emit("state_changed", state=self.state, keys=written)
            if result.notification is not None:
                self._emit("toast", notification=result.notification)
        elif result.outcome == Outcome.REJECTED:
            self._emit("rejected", notification=result.notification)
        return result

    # ── Derived views ────────────────────────────────────────────────────────

    def visible_tasks(self):
        return views.visible_tasks(self.state, self.filters)

    def active_columns(self):
        return views.active_columns(self.state.columns, self.state.custom_lists,
                                    self.filters.selected_list_id)

    def counts(self) -> views.TaskCounts:
        return views.task_counts(self.state.tasks, self.filters.selected_list_id,
                                 views.completion_status_ids(self.state))

    def lanes(self, today=None):
        return views.board_lanes(self.state, self.filters, today)

    def title(self) -> str:
        return views.view_title(self.state, self.filters)
