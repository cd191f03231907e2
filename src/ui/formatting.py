"""Display helpers for results and history."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from src.store.models import ClassificationResult

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_file_size(num_bytes: int) -> str:
    """Human-readable size, e.g. ``1536 -> "1.5 KB"``."""
    if num_bytes <= 0:
        return "0 Bytes"
    i = 0
    value = float(num_bytes)
    while value >= 1024 and i < len(SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{float(f'{value:.2f}'):g} {SIZE_UNITS[i]}"


def format_date(ts: datetime) -> str:
    return ts.strftime("%d/%m/%Y %H:%M")


def format_relative_time(ts: datetime, now: datetime | None = None) -> str:
    if now is None:
        now = datetime.now(UTC) if ts.tzinfo else datetime.now()
    seconds = int((now - ts).total_seconds())
    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} min ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    return format_date(ts)


def build_result_export(result: ClassificationResult) -> dict[str, Any]:
    return {
        "classification": result.classification.value,
        "confidence": result.percentage,
        "suggestedResponse": result.suggested_response,
        "timestamp": result.timestamp.isoformat(),
        "fileName": result.file_name,
    }


def build_history_export(
    results: Iterable[ClassificationResult],
    now: datetime | None = None,
) -> dict[str, Any]:
    """JSON-ready export of ``results`` with content previews."""
    items = list(results)
    return {
        "exportDate": (now or datetime.now(UTC)).isoformat(),
        "totalItems": len(items),
        "history": [
            {
                "id": item.id,
                "classification": item.classification.value,
                "confidence": item.percentage,
                "timestamp": item.timestamp.isoformat(),
                "fileName": item.file_name,
                "contentPreview": truncate_text(item.content, 100),
            }
            for item in items
        ],
    }
