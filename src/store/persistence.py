"""JSON-file persistence for the local result store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ValidationError

from src.store.models import AggregateStats, ClassificationResult

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class PersistedState(BaseModel):
    """The persisted subset of the store: history and stats only."""

    history: list[ClassificationResult] = []
    stats: AggregateStats = AggregateStats()


class _Envelope(BaseModel):
    version: int = SCHEMA_VERSION
    state: PersistedState


class StatePersistence:
    """Reads and writes one named state blob as a JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write leaves the previous blob intact.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> PersistedState | None:
        """Return the stored state, or None when absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            envelope = _Envelope.model_validate(raw)
        except (OSError, ValueError, ValidationError):
            logger.warning("Discarding unreadable store at %s", self.path, exc_info=True)
            return None
        if envelope.version != SCHEMA_VERSION:
            logger.warning(
                "Discarding store at %s with schema version %s", self.path, envelope.version
            )
            return None
        return envelope.state

    def save(self, state: PersistedState) -> None:
        """Atomically replace the stored blob with ``state``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = _Envelope(state=state).model_dump(mode="json")
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
