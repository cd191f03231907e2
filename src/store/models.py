"""Domain models for the local result store."""

from __future__ import annotations

import secrets
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from src.client.models import AnalysisRecord, Classification, StatsResponse


def to_percentage(confidence: float) -> int:
    """Scale a [0, 1] confidence to an integer percentage, rounding half up.

    Decimal arithmetic on the float's shortest repr keeps the result stable,
    e.g. ``0.285 -> 29`` rather than the binary-float ``28``.
    """
    scaled = Decimal(repr(float(confidence))) * 100
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def generate_id() -> str:
    """Generate a local id for records that arrive without one."""
    return f"{secrets.token_hex(6)}{int(time.time() * 1000):x}"


@dataclass
class ClassificationResult:
    """One classification outcome, as kept by the local store."""

    id: str
    content: str
    classification: Classification
    confidence: float  # 0.0 - 1.0
    suggested_response: str
    timestamp: datetime
    file_name: str | None = None
    file_type: str | None = None

    @property
    def percentage(self) -> int:
        return to_percentage(self.confidence)

    @property
    def is_productive(self) -> bool:
        return self.classification is Classification.PRODUCTIVE

    @classmethod
    def from_record(
        cls,
        record: AnalysisRecord,
        content: str,
        file_type: str | None = None,
    ) -> ClassificationResult:
        """Adapt a wire record; ``content`` is what the user submitted."""
        return cls(
            id=record.id or generate_id(),
            content=content,
            classification=record.classification,
            confidence=record.confidence,
            suggested_response=record.suggested_response,
            timestamp=record.analysis_timestamp,
            file_name=record.file_name,
            file_type=file_type,
        )


@dataclass(frozen=True)
class AggregateStats:
    """Derived statistics; ``average_confidence`` is an integer percentage."""

    total_processed: int = 0
    productive_count: int = 0
    unproductive_count: int = 0
    average_confidence: int = 0

    @classmethod
    def from_wire(cls, stats: StatsResponse) -> AggregateStats:
        return cls(
            total_processed=stats.total_processed,
            productive_count=stats.productive_count,
            unproductive_count=stats.unproductive_count,
            average_confidence=to_percentage(stats.average_confidence),
        )


def compute_stats(history: Iterable[ClassificationResult]) -> AggregateStats:
    """Recompute stats from scratch over ``history``."""
    items = list(history)
    total = len(items)
    if total == 0:
        return AggregateStats()
    productive = sum(1 for item in items if item.is_productive)
    pct_sum = sum(item.percentage for item in items)
    return AggregateStats(
        total_processed=total,
        productive_count=productive,
        unproductive_count=total - productive,
        # Integer round-half-up of pct_sum / total
        average_confidence=(2 * pct_sum + total) // (2 * total),
    )


@dataclass
class PendingFile:
    """An uploaded file staged for submission."""

    name: str
    data: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class PendingInput:
    """Transient staging area for the next submission; never persisted."""

    file: PendingFile | None = None
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return self.file is None and not self.text
