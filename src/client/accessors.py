"""Read-through views over the remote history and stats.

Each view fetches on every activation and keeps only its latest value in
memory. They do not read from or write to the local result store.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Generic, TypeVar

from src.client.api_client import APIClient
from src.client.errors import ClientError
from src.client.models import Classification, HistoryRecord
from src.store.models import AggregateStats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccessorStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ResponseOrdering(StrEnum):
    """How overlapping activations resolve.

    ``LAST_RESPONSE_WINS`` applies whichever response arrives last, even if it
    belongs to an older request. ``LAST_REQUEST_WINS`` tags each activation
    with a sequence number and drops responses older than the newest one
    already applied.
    """

    LAST_RESPONSE_WINS = "last_response_wins"
    LAST_REQUEST_WINS = "last_request_wins"


class ReadThroughAccessor(Generic[T]):
    """Fetch-on-activate state holder: idle -> loading -> loaded | error."""

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        ordering: ResponseOrdering = ResponseOrdering.LAST_RESPONSE_WINS,
    ) -> None:
        self._fetch = fetch
        self.ordering = ordering
        self.status = AccessorStatus.IDLE
        self.value: T | None = None
        self.error: str | None = None
        self._issued = 0
        self._applied = 0

    @property
    def loading(self) -> bool:
        return self.status is AccessorStatus.LOADING

    async def activate(self) -> T | None:
        """Issue one fetch and apply its outcome.

        Returns the fetched value, or None if the fetch failed. Client errors
        are recorded on the accessor rather than raised; any other exception
        is recorded as well and then re-raised.
        """
        self._issued += 1
        seq = self._issued
        self.status = AccessorStatus.LOADING
        self.error = None

        try:
            value = await self._fetch()
        except ClientError as e:
            logger.warning("%s fetch failed: %s", type(self).__name__, e)
            self._apply_error(seq, e.message)
            return None
        except Exception as e:
            logger.exception("%s fetch raised unexpectedly", type(self).__name__)
            self._apply_error(seq, str(e) or type(e).__name__)
            raise

        if self._should_apply(seq):
            self.value = value
            self.status = AccessorStatus.LOADED
        return value

    def replace(self, value: T) -> None:
        """Install a value known locally as the newest state.

        Under ``LAST_REQUEST_WINS`` responses to fetches issued earlier are
        discarded when they arrive.
        """
        self._issued += 1
        self._applied = self._issued
        self.value = value
        self.status = AccessorStatus.LOADED
        self.error = None

    def _apply_error(self, seq: int, message: str) -> None:
        if self._should_apply(seq):
            self.status = AccessorStatus.ERROR
            self.error = message

    def _should_apply(self, seq: int) -> bool:
        if self.ordering is ResponseOrdering.LAST_REQUEST_WINS:
            if seq < self._applied:
                logger.debug("Discarding stale response #%d (applied #%d)", seq, self._applied)
                return False
        self._applied = max(self._applied, seq)
        return True


class RemoteHistoryView(ReadThroughAccessor[list[HistoryRecord]]):
    """Server-side history; distinct from ``LocalResultStore.history``."""

    def __init__(
        self,
        client: APIClient,
        limit: int = 50,
        classification: Classification | None = None,
        ordering: ResponseOrdering = ResponseOrdering.LAST_RESPONSE_WINS,
    ) -> None:
        self._client = client
        self.limit = limit
        self.classification = classification
        super().__init__(self._fetch_history, ordering=ordering)

    async def _fetch_history(self) -> list[HistoryRecord]:
        return await self._client.fetch_history(self.limit, self.classification)

    @property
    def items(self) -> list[HistoryRecord]:
        return self.value or []

    async def clear(self) -> None:
        """Delete the server history, then empty the displayed list.

        On failure the displayed data is left as-is and the error propagates.
        """
        await self._client.clear_history()
        self.replace([])

    def remove(self, record_id: str) -> None:
        """Hide one record from the displayed list (server is not touched)."""
        if self.value is not None:
            self.value = [item for item in self.value if item.id != record_id]

    def filtered(self, classification: Classification | None) -> list[HistoryRecord]:
        if classification is None:
            return self.items
        return [item for item in self.items if item.classification == classification]

    def counts(self) -> dict[str, int]:
        productive = len(self.filtered(Classification.PRODUCTIVE))
        return {
            "all": len(self.items),
            Classification.PRODUCTIVE.value: productive,
            Classification.UNPRODUCTIVE.value: len(self.items) - productive,
        }


class RemoteStatsView(ReadThroughAccessor[AggregateStats]):
    """Server-side aggregate stats, converted to percentage form."""

    def __init__(
        self,
        client: APIClient,
        ordering: ResponseOrdering = ResponseOrdering.LAST_RESPONSE_WINS,
    ) -> None:
        self._client = client
        super().__init__(self._fetch_stats, ordering=ordering)

    async def _fetch_stats(self) -> AggregateStats:
        return AggregateStats.from_wire(await self._client.fetch_stats())
