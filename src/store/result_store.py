"""Persisted, size-bounded cache of recent classification results.

The store is the client-side record of what this user has classified. It is
independent of the server history exposed by ``RemoteHistoryView``; the two
are never merged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.store.models import (
    AggregateStats,
    ClassificationResult,
    PendingFile,
    PendingInput,
    compute_stats,
)
from src.store.persistence import PersistedState, StatePersistence

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


@dataclass(frozen=True)
class StoreSnapshot:
    """History (newest first) together with the stats derived from it."""

    history: tuple[ClassificationResult, ...] = ()
    stats: AggregateStats = AggregateStats()


class LocalResultStore:
    """Local result cache plus transient submission state.

    Only ``history`` and ``stats`` are persisted. Mutations never raise: a
    failed write is logged and the store keeps working in memory.
    """

    def __init__(
        self,
        persistence: StatePersistence | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be positive")
        self.history_limit = history_limit
        self._persistence = persistence
        self._snapshot = StoreSnapshot()

        self.current_result: ClassificationResult | None = None
        self.current_input = PendingInput()
        self.is_processing = False

        self._restore()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def history(self) -> tuple[ClassificationResult, ...]:
        return self._snapshot.history

    @property
    def stats(self) -> AggregateStats:
        return self._snapshot.stats

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, result: ClassificationResult) -> None:
        """Record ``result`` as current and prepend it to the history."""
        self.current_result = result
        history = (result, *self._snapshot.history)
        if len(history) > self.history_limit:
            logger.debug("Evicting %d oldest result(s)", len(history) - self.history_limit)
            history = history[: self.history_limit]
        self._commit(history)

    def remove(self, result_id: str) -> None:
        """Drop the entry with ``result_id``; unknown ids are ignored."""
        history = tuple(item for item in self._snapshot.history if item.id != result_id)
        if len(history) == len(self._snapshot.history):
            return
        self._commit(history)

    def clear(self) -> None:
        """Empty the history and zero the stats. ``current_result`` is kept."""
        self._commit(())

    def set_processing(self, processing: bool) -> None:
        self.is_processing = processing

    def try_begin_processing(self) -> bool:
        """Set ``is_processing`` if it is clear; return whether it was set."""
        if self.is_processing:
            return False
        self.is_processing = True
        return True

    def end_processing(self) -> None:
        self.is_processing = False

    def set_input(self, file: PendingFile | None = None, text: str = "") -> None:
        self.current_input = PendingInput(file=file, text=text)

    def set_file(self, file: PendingFile | None) -> None:
        self.current_input = PendingInput(file=file, text=self.current_input.text)

    def set_text(self, text: str) -> None:
        self.current_input = PendingInput(file=self.current_input.file, text=text)

    def clear_input(self) -> None:
        self.current_input = PendingInput()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self, history: tuple[ClassificationResult, ...]) -> None:
        # History and stats are swapped together in a single assignment.
        self._snapshot = StoreSnapshot(history=history, stats=compute_stats(history))
        self._persist()

    def _persist(self) -> None:
        if self._persistence is None:
            return
        state = PersistedState(history=list(self._snapshot.history), stats=self._snapshot.stats)
        try:
            self._persistence.save(state)
        except Exception:
            logger.exception("Could not persist result store; continuing in memory")

    def _restore(self) -> None:
        if self._persistence is None:
            return
        try:
            state = self._persistence.load()
        except Exception:
            logger.exception("Could not load result store; starting empty")
            return
        if state is None:
            return
        history = tuple(state.history[: self.history_limit])
        # Stats are re-derived rather than trusted from disk.
        self._snapshot = StoreSnapshot(history=history, stats=compute_stats(history))
        if state.stats != self._snapshot.stats:
            logger.warning("Persisted stats were stale; recomputed from history")
