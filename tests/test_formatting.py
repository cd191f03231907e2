"""Tests for display and export helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from conftest import make_result

from src.client.models import Classification, HistoryRecord
from src.store.models import ClassificationResult
from src.ui.formatting import (
    build_history_export,
    build_result_export,
    format_file_size,
    format_relative_time,
    truncate_text,
)

NOW = datetime(2026, 5, 10, 12, 0, tzinfo=UTC)


class TestTruncateText:
    def test_short_text_unchanged(self) -> None:
        assert truncate_text("hello", 10) == "hello"

    def test_long_text_truncated(self) -> None:
        assert truncate_text("abcdefghij", 4) == "abcd..."


class TestFormatFileSize:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (5 * 1024 * 1024, "5 MB"),
            (1234567, "1.18 MB"),
        ],
    )
    def test_sizes(self, size: int, expected: str) -> None:
        assert format_file_size(size) == expected


class TestFormatRelativeTime:
    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(seconds=30), "Just now"),
            (timedelta(minutes=5), "5 min ago"),
            (timedelta(hours=3), "3h ago"),
            (timedelta(days=2), "2d ago"),
        ],
    )
    def test_recent(self, delta: timedelta, expected: str) -> None:
        assert format_relative_time(NOW - delta, now=NOW) == expected

    def test_old_dates_are_absolute(self) -> None:
        assert format_relative_time(NOW - timedelta(days=30), now=NOW) == "10/04/2026 12:00"


class TestExports:
    def test_history_export(self) -> None:
        long_result = make_result(1, Classification.UNPRODUCTIVE, 0.4)
        long_result.content = "x" * 150
        export = build_history_export([make_result(2), long_result], now=NOW)

        assert export["exportDate"] == NOW.isoformat()
        assert export["totalItems"] == 2
        assert export["history"][0]["confidence"] == 90
        assert export["history"][1]["classification"] == "unproductive"
        assert export["history"][1]["contentPreview"] == "x" * 100 + "..."

    def test_result_export(self) -> None:
        export = build_result_export(make_result(3, confidence=0.875))
        assert export["confidence"] == 88
        assert export["classification"] == "productive"
        assert export["fileName"] is None

    def test_server_history_export(self) -> None:
        record = HistoryRecord(
            id="srv-1",
            content="Please review the attached invoice.",
            classification=Classification.PRODUCTIVE,
            confidence=0.91,
            suggested_response="On it",
            analysis_timestamp=NOW,
            file_name="invoice.txt",
        )
        export = build_history_export(
            [ClassificationResult.from_record(record, record.content)], now=NOW
        )
        assert export["totalItems"] == 1
        assert export["history"][0] == {
            "id": "srv-1",
            "classification": "productive",
            "confidence": 91,
            "timestamp": NOW.isoformat(),
            "fileName": "invoice.txt",
            "contentPreview": "Please review the attached invoice.",
        }
