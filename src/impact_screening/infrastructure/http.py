"""JSON-over-HTTP client shared by every remote adapter.

Uses ``httpx`` to POST JSON bodies to analyzer, evidence, verification,
support, translation and document endpoints.  All transport-level failures
are mapped in one place to :class:`AdapterUnavailableError`, so adapters
only deal with response *shapes*.

Retry policy: HTTP 429 is retried with exponential backoff up to
``max_retries`` times; every other failure is raised immediately.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from impact_screening.domain.exceptions import AdapterUnavailableError

logger = logging.getLogger(__name__)


class JsonEndpointClient:
    """Async JSON client bound to one base URL.

    Parameters
    ----------
    base_url:
        Base URL of the service (e.g. ``"http://localhost:8000"``).
    api_key:
        Optional API key.  Sent in the ``Authorization: Bearer`` header.
    timeout:
        Default request timeout in seconds; each call may override it.
    max_retries:
        Maximum number of retries on rate-limit (HTTP 429) responses.
    base_retry_delay:
        Base delay for exponential backoff.
    extra_headers:
        Additional headers to send with every request.
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        base_retry_delay: float = 0.5,
        extra_headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._base_retry_delay = base_retry_delay

        headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        if extra_headers:
            headers.update(extra_headers)

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=headers,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def post(
        self,
        path: str,
        payload: Mapping[str, Any],
        *,
        timeout: float | None = None,
        adapter: str = "",
    ) -> dict[str, Any]:
        """POST *payload* to *path* and return the decoded JSON object.

        Raises
        ------
        AdapterUnavailableError
            On connection errors, timeouts, non-2xx responses, exhausted
            rate-limit retries, or a body that is not a JSON object.
        """
        url = self.url_for(path)
        adapter = adapter or path
        request_timeout = httpx.Timeout(timeout) if timeout is not None else None

        for attempt in range(self._max_retries + 1):
            try:
                if request_timeout is not None:
                    response = await self._client.post(
                        url, json=dict(payload), timeout=request_timeout
                    )
                else:
                    response = await self._client.post(url, json=dict(payload))
            except httpx.TimeoutException as exc:
                raise AdapterUnavailableError(
                    f"Request to {url} timed out: {exc}", adapter=adapter
                ) from exc
            except httpx.HTTPError as exc:
                raise AdapterUnavailableError(
                    f"Failed to reach {url}: {exc}", adapter=adapter
                ) from exc

            if response.status_code == 429:
                if attempt < self._max_retries:
                    delay = self._base_retry_delay * (2 ** attempt)
                    logger.warning(
                        "JsonEndpointClient: rate limited by %s (attempt %d/%d), "
                        "retrying in %.1fs",
                        url,
                        attempt + 1,
                        self._max_retries + 1,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise AdapterUnavailableError(
                    f"Rate limit exceeded after {self._max_retries + 1} attempts: {url}",
                    adapter=adapter,
                    status_code=429,
                )

            if response.status_code >= 400:
                raise AdapterUnavailableError(
                    f"HTTP {response.status_code} from {url}: {response.text[:200]}",
                    adapter=adapter,
                    status_code=response.status_code,
                )

            try:
                data = response.json()
            except ValueError as exc:  # JSONDecodeError or UnicodeDecodeError
                raise AdapterUnavailableError(
                    f"Invalid JSON response from {url}: {exc}", adapter=adapter
                ) from exc

            if not isinstance(data, dict):
                raise AdapterUnavailableError(
                    f"Expected a JSON object from {url}, got {type(data).__name__}",
                    adapter=adapter,
                )
            return data

        raise AdapterUnavailableError(  # pragma: no cover - loop always returns or raises
            f"No response from {url}", adapter=adapter
        )

    async def aclose(self) -> None:
        """Close the underlying async HTTP client."""
        await self._client.aclose()

    def __repr__(self) -> str:
        return f"JsonEndpointClient(base_url={self._base_url!r})"
