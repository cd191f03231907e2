"""Submission flow: validate input, classify it remotely, record it locally."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import PurePath

from src.client.accessors import ReadThroughAccessor
from src.client.api_client import APIClient
from src.client.errors import SubmissionInProgressError, ValidationError
from src.store.models import ClassificationResult, PendingFile
from src.store.result_store import LocalResultStore

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 10
MAX_CONTENT_LENGTH = 10_000
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_UPLOAD_SUFFIXES = (".txt", ".pdf")
FILE_PLACEHOLDER = "File"


def validate_email_content(content: str) -> None:
    """Raise ValidationError if ``content`` is not submittable text."""
    if not content.strip():
        raise ValidationError("Content cannot be empty")
    if len(content.strip()) < MIN_CONTENT_LENGTH:
        raise ValidationError(f"Content must be at least {MIN_CONTENT_LENGTH} characters")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Content cannot exceed {MAX_CONTENT_LENGTH:,} characters")


def validate_upload(file_name: str, size: int) -> None:
    """Raise ValidationError for unsupported or oversized uploads."""
    if PurePath(file_name).suffix.lower() not in ALLOWED_UPLOAD_SUFFIXES:
        raise ValidationError("Only .txt and .pdf files are supported")
    if size > MAX_UPLOAD_BYTES:
        raise ValidationError("File too large. Maximum: 5MB")


class SubmissionFlow:
    """Runs one submission at a time against ``client`` and ``store``.

    ``refresh_views`` are remote views re-activated after each successful
    submission. None are refreshed by default. With ``validate_input`` off,
    input goes to the service unchecked and only the service validates it.
    """

    def __init__(
        self,
        client: APIClient,
        store: LocalResultStore,
        refresh_views: Sequence[ReadThroughAccessor] = (),  # type: ignore[type-arg]
        validate_input: bool = True,
    ) -> None:
        self.client = client
        self.store = store
        self.refresh_views = tuple(refresh_views)
        self.validate_input = validate_input

    async def submit_text(self, content: str, file_name: str | None = None) -> ClassificationResult:
        if self.validate_input:
            validate_email_content(content)
        self._begin()
        try:
            record = await self.client.submit_text(content, file_name)
            result = ClassificationResult.from_record(record, content=content)
            self.store.append(result)
        finally:
            self.store.end_processing()
        await self._refresh()
        return result

    async def submit_file(self, file: PendingFile) -> ClassificationResult:
        if self.validate_input:
            validate_upload(file.name, file.size)
        self._begin()
        try:
            record = await self.client.submit_file(file.name, file.data, file.content_type)
            result = ClassificationResult.from_record(
                record,
                content=file.name or FILE_PLACEHOLDER,
                file_type=file.content_type,
            )
            self.store.append(result)
        finally:
            self.store.end_processing()
        await self._refresh()
        return result

    async def submit_pending(self) -> ClassificationResult:
        """Submit the store's staged input; a staged file takes precedence."""
        pending = self.store.current_input
        if pending.file is not None:
            result = await self.submit_file(pending.file)
        elif pending.text:
            result = await self.submit_text(pending.text)
        else:
            raise ValidationError("Nothing to analyze")
        self.store.clear_input()
        return result

    def _begin(self) -> None:
        if not self.store.try_begin_processing():
            raise SubmissionInProgressError("A submission is already in progress")

    async def _refresh(self) -> None:
        for view in self.refresh_views:
            await view.activate()
