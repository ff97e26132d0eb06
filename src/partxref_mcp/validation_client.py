"""Client for the batch resolution/matching service (NDJSON stream)."""

import logging
from typing import Any, AsyncIterator

import httpx

from .config import VALIDATION_ENDPOINT, VALIDATION_REQUEST_TIMEOUT, VALIDATION_SERVICE_URL

logger = logging.getLogger(__name__)


class ValidationServiceError(Exception):
    """The validation service refused the request or the stream broke."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ValidationServiceClient:
    """Async client that posts a batch and yields the raw response chunks."""

    def __init__(
        self,
        base_url: str = VALIDATION_SERVICE_URL,
        timeout: float = VALIDATION_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def stream_results(
        self,
        items: list[dict[str, Any]],
        currency: str | None = None,
    ) -> AsyncIterator[bytes]:
        """POST the batch and yield response bytes as they arrive.

        Args:
            items: [{"rowIndex", "mpn", "manufacturer"?, "description"?}]
            currency: Optional currency code passed through to pricing

        Raises:
            ValidationServiceError: HTTP status >= 400 or a transport failure
        """
        body: dict[str, Any] = {"items": items}
        if currency:
            body["currency"] = currency
        url = f"{self._base_url}{VALIDATION_ENDPOINT}"

        try:
            async with self._get_client().stream("POST", url, json=body) as response:
                if response.status_code >= 400:
                    raise ValidationServiceError(
                        f"Validation service returned HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                async for chunk in response.aiter_bytes():
                    if chunk:
                        yield chunk
        except httpx.HTTPError as e:
            # Sanitize: keep the exception type, drop URLs and payload echoes
            logger.warning(f"Validation stream failed: {type(e).__name__}")
            raise ValidationServiceError(f"Validation service request failed ({type(e).__name__})") from None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
