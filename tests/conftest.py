"""Shared fixtures: an in-memory stand-in for the classification service."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import APIRouter, FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from src.client.api_client import APIClient
from src.client.models import AnalysisRequest, Classification
from src.store.models import ClassificationResult

BASE_URL = "http://testserver/api/v1"

PRODUCTIVE_KEYWORDS = ("please", "request", "review", "issue", "help", "invoice")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "timestamp": datetime.now(UTC).isoformat()},
    )


class FakeClassificationService:
    """Keeps analyses in memory and serves the service's HTTP contract."""

    def __init__(self) -> None:
        self.records: list[dict[str, object]] = []
        self.app = FastAPI()
        self.app.include_router(self._router(), prefix="/api/v1")

    def _classify(self, content: str, file_name: str | None) -> dict[str, object]:
        productive = any(word in content.lower() for word in PRODUCTIVE_KEYWORDS)
        record: dict[str, object] = {
            "id": str(uuid.uuid4()),
            "content": content,
            "classification": "productive" if productive else "unproductive",
            "confidence": 0.91 if productive else 0.4,
            "suggested_response": "Thanks, we are on it." if productive else "Thank you!",
            "analysis_timestamp": datetime.now(UTC).isoformat(),
            "file_name": file_name,
        }
        self.records.insert(0, record)
        return record

    def _router(self) -> APIRouter:
        router = APIRouter()

        @router.get("/health")
        async def health() -> dict[str, str]:
            return {
                "status": "healthy",
                "app_name": "Email Classifier",
                "version": "1.0.0",
                "timestamp": datetime.now(UTC).isoformat(),
            }

        @router.post("/analyze")
        async def analyze(body: AnalysisRequest) -> Any:
            if len(body.content.strip()) < 10:
                return _error(422, "too short")
            return self._classify(body.content, body.file_name)

        @router.post("/analyze/file")
        async def analyze_file(file: UploadFile = File(...)) -> Any:
            raw = await file.read()
            if not raw:
                return _error(400, "empty file")
            return self._classify(raw.decode("utf-8", errors="replace"), file.filename)

        @router.get("/analysis/{analysis_id}")
        async def get_analysis(analysis_id: str) -> Any:
            for record in self.records:
                if record["id"] == analysis_id:
                    return record
            return _error(404, "Analysis not found")

        @router.get("/history")
        async def history(limit: int = 50, classification: Classification | None = None) -> Any:
            items = self.records
            if classification is not None:
                items = [r for r in items if r["classification"] == classification.value]
            return items[:limit]

        @router.get("/stats")
        async def stats() -> dict[str, Any]:
            total = len(self.records)
            productive = sum(1 for r in self.records if r["classification"] == "productive")
            avg = sum(float(r["confidence"]) for r in self.records) / total if total else 0.0  # type: ignore[arg-type]
            return {
                "total_processed": total,
                "productive_count": productive,
                "unproductive_count": total - productive,
                "average_confidence": avg,
            }

        @router.delete("/history")
        async def clear_history() -> dict[str, str]:
            self.records.clear()
            return {"message": "History cleared"}

        return router


@pytest.fixture
def service() -> FakeClassificationService:
    return FakeClassificationService()


@pytest_asyncio.fixture
async def api_client(service: FakeClassificationService) -> AsyncIterator[APIClient]:
    """APIClient wired to the fake service through ASGI (no network)."""
    transport = httpx.ASGITransport(app=service.app)
    async with APIClient(BASE_URL, transport=transport) as client:
        yield client


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> APIClient:
    """APIClient whose every request is answered by ``handler``."""
    return APIClient(BASE_URL, transport=httpx.MockTransport(handler))


def make_result(
    index: int,
    classification: Classification = Classification.PRODUCTIVE,
    confidence: float = 0.9,
) -> ClassificationResult:
    return ClassificationResult(
        id=f"result-{index}",
        content=f"Email body number {index}",
        classification=classification,
        confidence=confidence,
        suggested_response="Thanks for reaching out.",
        timestamp=datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=index),
    )
