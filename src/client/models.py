"""Pydantic request/response schemas for the classification service."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class Classification(StrEnum):
    """Binary label assigned to an email."""

    PRODUCTIVE = "productive"
    UNPRODUCTIVE = "unproductive"


class AnalysisRequest(BaseModel):
    """Request body for POST /analyze."""

    content: str
    file_name: str | None = None


class AnalysisRecord(BaseModel):
    """A server-side analysis as returned by /analyze and /analysis/{id}."""

    id: str = ""
    classification: Classification
    confidence: float  # 0.0 - 1.0
    suggested_response: str
    analysis_timestamp: datetime
    file_name: str | None = None


class HistoryRecord(AnalysisRecord):
    """An entry of GET /history; carries the analysed content as well."""

    content: str = ""


class StatsResponse(BaseModel):
    """Server-side aggregate statistics."""

    total_processed: int
    productive_count: int
    unproductive_count: int
    average_confidence: float  # 0.0 - 1.0


class HealthResponse(BaseModel):
    status: str
    app_name: str = ""
    version: str = ""
    timestamp: str | None = None


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Structured error body the service sends with non-2xx responses."""

    error: str
    detail: str | None = None
    timestamp: str | None = None
