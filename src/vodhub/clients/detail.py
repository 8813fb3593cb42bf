"""
vodhub.clients.detail - Video detail lookup.

Configured sources are POSTed in full so the backend can reach custom
catalogs; bare source ids fall back to a GET the backend must resolve.
Status mapping:

- 404 -> DetailUnavailableError
- other non-2xx, transport failures, malformed bodies -> DetailError
"""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from vodhub.config.defaults import DETAIL_PATH, DETAIL_TIMEOUT
from vodhub.exceptions import DetailError, DetailUnavailableError
from vodhub.models.episode import DetailResponse, VideoDetail
from vodhub.models.source import ConfiguredSource, ResolvedSource

logger = logging.getLogger(__name__)


class DetailClient:
    """Fetches video details (metadata + episodes) from the backend.

    Args:
        base_url: Backend base URL, e.g. ``http://localhost:3000``.
        timeout: Request timeout in seconds.
        client: Optional shared httpx.AsyncClient. When omitted a client is
            created per request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DETAIL_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self._url = base_url.rstrip("/") + DETAIL_PATH
        self._timeout = timeout
        self._client = client

    async def fetch(self, video_id: str, source: ResolvedSource) -> VideoDetail:
        """Look up ``video_id`` on ``source``.

        Raises:
            DetailUnavailableError: The source reported 404 for this video.
            DetailError: Any other failure.
        """
        try:
            if self._client is not None:
                response = await self._send(self._client, video_id, source)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._send(client, video_id, source)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Detail request for {video_id} failed: {e}")
            raise DetailError(
                f"Failed to load video details: {e}",
                category="network",
                details={"video_id": video_id, "source": source.source_id},
            ) from e

        return self._parse(response, video_id, source)

    async def _send(
        self, client: httpx.AsyncClient, video_id: str, source: ResolvedSource
    ) -> httpx.Response:
        if isinstance(source, ConfiguredSource):
            return await client.post(
                self._url,
                json={"id": video_id, "source": source.config.to_payload()},
                timeout=self._timeout,
            )
        return await client.get(
            self._url,
            params={"id": video_id, "source": source.source_id},
            timeout=self._timeout,
        )

    def _parse(
        self, response: httpx.Response, video_id: str, source: ResolvedSource
    ) -> VideoDetail:
        details = {"video_id": video_id, "source": source.source_id}

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        error = body.get("error") if isinstance(body, dict) else None

        if response.status_code == 404:
            if error:
                raise DetailUnavailableError(error, details=details)
            raise DetailUnavailableError(details=details)

        if not response.is_success:
            raise DetailError(
                error or f"HTTP {response.status_code}: {response.reason_phrase}",
                details=details,
                http_code=response.status_code,
            )

        if not isinstance(body, dict):
            raise DetailError(
                "Invalid response from API", category="invalid_response", details=details
            )

        try:
            parsed = DetailResponse.model_validate(body)
        except ValidationError as e:
            logger.debug(f"Detail body for {video_id} failed validation: {e}")
            raise DetailError(
                "Invalid response from API", category="invalid_response", details=details
            ) from e

        if not parsed.success or parsed.data is None:
            raise DetailError(
                parsed.error or "Invalid response from API",
                category="invalid_response",
                details=details,
            )
        return parsed.data
