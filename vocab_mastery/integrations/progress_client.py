"""
Progress Persistence Client

HTTP client that hands finished session summaries to the progress service,
which owns them afterwards. Transport failures and error responses surface as
Unavailable; retrying is up to the caller.

Usage:
    async with ProgressClient.from_settings(get_settings()) as client:
        await client.upload_summary(summary)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from vocab_mastery.core.errors import Unavailable
from vocab_mastery.core.models import SessionSummary

if TYPE_CHECKING:
    from vocab_mastery.config import Settings

SESSIONS_ENDPOINT = "/api/v1/sessions"


class ProgressClient:
    """HTTP client for the progress persistence API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ProgressClient:
        if not settings.has_progress_api_configured():
            raise Unavailable("Progress API URL is not configured")
        return cls(
            base_url=settings.progress_api_url,
            api_key=settings.progress_api_key,
            timeout=settings.progress_timeout_seconds,
        )

    async def __aenter__(self) -> ProgressClient:
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["X-API-Key"] = self.api_key

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def upload_summary(self, summary: SessionSummary) -> dict[str, Any]:
        """
        Post a session summary.

        Returns:
            The service's JSON response (empty dict for an empty body)

        Raises:
            Unavailable: connection failure or non-2xx response
        """
        client = await self._ensure_client()
        try:
            response = await client.post(SESSIONS_ENDPOINT, json=summary.to_dict())
        except httpx.RequestError as e:
            logger.error(f"Connection error uploading session summary: {e}")
            raise Unavailable(f"Progress service unreachable: {e}") from e

        if not response.is_success:
            logger.error(f"Session summary upload failed: {response.status_code}")
            raise Unavailable(f"Progress service returned {response.status_code}")

        logger.debug(f"Uploaded {summary.session_kind} session summary for {summary.learner_id}")
        return response.json() if response.content else {}
