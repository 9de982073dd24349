"""Remote dad-joke fetcher."""

from __future__ import annotations

import time

import httpx
import structlog

from dadbot.config import RemarksConfig

logger = structlog.get_logger()


class TransportError(RuntimeError):
    """The joke service could not be reached or returned an unusable response."""


class RemarkFetcher:
    """Fetches one plain-text remark per call from the configured endpoint."""

    def __init__(
        self,
        config: RemarksConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self.request_count = 0

    async def fetch(self) -> str:
        """GET the endpoint and return the body text.

        Raises:
            TransportError: on connect/read failure, timeout, non-2xx status
                or an empty body.
        """
        headers = {
            "Accept": "text/plain",
            "User-Agent": self.config.user_agent,
        }
        timeout = httpx.Timeout(self.config.timeout_s)

        start = time.monotonic()
        self.request_count += 1
        request_id = self.request_count

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.get(self.config.url, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "remarks.fetch_failed",
                request_id=request_id,
                url=self.config.url,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        text = response.text.strip()
        if not text:
            logger.warning("remarks.fetch_failed", request_id=request_id, reason="empty_body")
            raise TransportError("joke service returned an empty body")

        logger.info(
            "remarks.fetched",
            request_id=request_id,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - start) * 1000),
        )
        return text
