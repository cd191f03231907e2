"""Async HTTP client for the email classification service."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from src.client.errors import NetworkError, ParseError, ServerError, ValidationError
from src.client.models import (
    AnalysisRecord,
    AnalysisRequest,
    Classification,
    ErrorResponse,
    HealthResponse,
    HistoryRecord,
    MessageResponse,
    StatsResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

NETWORK_ERROR_MESSAGE = "Could not reach the classification service"

# Statuses that mean "the service rejected this input"
VALIDATION_STATUSES = frozenset({400, 413, 422})


def _error_from_response(response: httpx.Response) -> ServerError | ValidationError:
    """Build the error for a non-2xx response.

    The body is parsed as an ``ErrorResponse`` first; when that fails a
    status-derived message is used instead.
    """
    detail: str | None = None
    try:
        body = ErrorResponse.model_validate(response.json())
        message = body.error or f"HTTP {response.status_code}"
        detail = body.detail
    except (ValueError, SchemaError):
        message = f"HTTP {response.status_code}: {response.reason_phrase}"

    error_cls = ValidationError if response.status_code in VALIDATION_STATUSES else ServerError
    return error_cls(message, status_code=response.status_code, detail=detail)


class APIClient:
    """Typed gateway to the classification service.

    Usage::

        async with APIClient("http://localhost:8000/api/v1") as client:
            record = await client.submit_text("Please review the attached invoice.")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.DecodingError as e:
            logger.warning("%s %s returned an undecodable body: %s", method, path, e)
            raise ParseError("Response body could not be decoded", detail=str(e)) from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(NETWORK_ERROR_MESSAGE, detail=str(e)) from e

        if not response.is_success:
            error = _error_from_response(response)
            logger.warning("%s %s returned %d: %s", method, path, response.status_code, error)
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(
                "Response body is not valid JSON",
                status_code=response.status_code,
                detail=response.text[:200],
            ) from e

    @staticmethod
    def _parse(model: type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except SchemaError as e:
            raise ParseError(f"Unexpected {model.__name__} payload", detail=str(e)) from e

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def submit_text(self, content: str, file_name: str | None = None) -> AnalysisRecord:
        """Submit raw email text for classification."""
        if not content or not content.strip():
            raise ValidationError("Content cannot be empty")
        body = AnalysisRequest(content=content, file_name=file_name)
        payload = await self._request(
            "POST", "/analyze", json=body.model_dump(exclude_none=True)
        )
        return self._parse(AnalysisRecord, payload)

    async def submit_file(
        self,
        file_name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> AnalysisRecord:
        """Upload a file as multipart; the service extracts its text."""
        if not data:
            raise ValidationError("File is empty")
        file_field: tuple[str, bytes] | tuple[str, bytes, str]
        file_field = (file_name, data, content_type) if content_type else (file_name, data)
        payload = await self._request("POST", "/analyze/file", files={"file": file_field})
        return self._parse(AnalysisRecord, payload)

    async def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        payload = await self._request("GET", f"/analysis/{analysis_id}")
        return self._parse(AnalysisRecord, payload)

    async def fetch_history(
        self,
        limit: int = 50,
        classification: Classification | str | None = None,
    ) -> list[HistoryRecord]:
        """Fetch the server-side history, newest first."""
        params: dict[str, str | int] = {"limit": limit}
        if classification:
            try:
                params["classification"] = Classification(classification).value
            except ValueError as e:
                raise ValidationError(
                    f"Unknown classification filter: {classification!r}"
                ) from e
        payload = await self._request("GET", "/history", params=params)
        if not isinstance(payload, list):
            raise ParseError("Expected a list of history records")
        return [self._parse(HistoryRecord, item) for item in payload]

    async def fetch_stats(self) -> StatsResponse:
        payload = await self._request("GET", "/stats")
        return self._parse(StatsResponse, payload)

    async def clear_history(self) -> MessageResponse:
        """Delete the server-side history. The local store is not touched."""
        payload = await self._request("DELETE", "/history")
        return self._parse(MessageResponse, payload)

    async def health(self) -> HealthResponse:
        payload = await self._request("GET", "/health")
        return self._parse(HealthResponse, payload)

    async def health_check(self) -> bool:
        """Return True if the service reports itself healthy. Never raises."""
        try:
            result = await self.health()
        except Exception:
            logger.debug("Health check failed", exc_info=True)
            return False
        return result.status == "healthy"
