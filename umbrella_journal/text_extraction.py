"""Async client for the document-to-text conversion service.

Used downstream of parsing to turn rich attachments (PDF, Office, ...)
into plain text.  A failing or unavailable service is reported per part
and never affects the already-parsed :class:`Message`.
"""

from __future__ import annotations

import httpx
import structlog
from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import TextExtractionConfig
from .exceptions import TextExtractionError
from .models import Message

logger = structlog.get_logger()

# Loggers that emit one INFO line per request.
HTTP_LOGGERS = ("httpx", "httpcore")


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class PartText(BaseModel):
    """Outcome of converting one part to text."""

    index: int = Field(description="Position of the part in Message.parts")
    content_type: str = Field(description="MIME type sent to the service")
    text: str | None = Field(default=None, description="Extracted text, if successful")
    error: str | None = Field(default=None, description="Failure reason, if unsuccessful")


class TextExtractionClient:
    """Posts raw part bytes to the extraction service and returns plain text.

    The client is disabled when ``base_url`` is empty; every extraction
    then fails with :class:`TextExtractionError`.
    """

    def __init__(self, config: TextExtractionConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None
        self._started = False

    async def __aenter__(self) -> TextExtractionClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    @property
    def enabled(self) -> bool:
        return bool(self._config.base_url)

    async def start(self) -> None:
        self._started = True
        if not self.enabled:
            logger.info("text_extraction_disabled", reason="empty_base_url")
            return
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(self._config.timeout_seconds),
        )
        logger.info("text_extraction_started", base_url=self._config.base_url)

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.info("text_extraction_stopped")

    async def extract_text(self, content: bytes, content_type: str) -> str:
        """Convert *content* of MIME type *content_type* to plain text.

        Transport errors and 5xx responses are retried with exponential
        backoff; anything still failing raises :class:`TextExtractionError`.
        """
        if not self._started:
            raise AssertionError("Client not started")
        if self._client is None:
            raise TextExtractionError("text extraction service is disabled")

        retry_config = self._config.retry
        retrying = AsyncRetrying(
            stop=stop_after_attempt(retry_config.max_attempts),
            wait=wait_exponential(
                multiplier=retry_config.multiplier,
                min=retry_config.initial_wait_seconds,
                max=retry_config.max_wait_seconds,
            ),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._client.post(
                        self._config.endpoint,
                        content=content,
                        headers={"Content-Type": content_type},
                    )
                    response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TextExtractionError(
                f"text extraction returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TextExtractionError(f"text extraction request failed: {exc}") from exc

        logger.debug(
            "text_extracted",
            content_type=content_type,
            size=len(content),
            status_code=response.status_code,
        )
        return response.text


async def extract_part_texts(message: Message, client: TextExtractionClient) -> list[PartText]:
    """Convert every non-``text/*`` part of *message* to text.

    Failures are recorded in the returned entries; *message* is untouched.
    """
    results: list[PartText] = []
    for index, part in enumerate(message.parts):
        if part.content_type.startswith("text/"):
            continue
        try:
            text = await client.extract_text(part.content, part.content_type)
        except TextExtractionError as exc:
            logger.warning(
                "text_extraction_failed",
                index=index,
                content_type=part.content_type,
                error=exc.message,
            )
            results.append(PartText(index=index, content_type=part.content_type, error=exc.message))
            continue
        results.append(PartText(index=index, content_type=part.content_type, text=text))
    return results
