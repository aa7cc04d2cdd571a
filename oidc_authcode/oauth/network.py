"""Network collaborator contract and the default httpx implementation.

The engine issues exactly the requests it needs through NetworkModule and
never retries. Timeout policy belongs to the implementation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from .errors import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class NetworkRequestOptions:
    """Headers and optional body for an outgoing request."""

    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


@dataclass
class NetworkResponse:
    """Response handed back to the engine.

    Attributes:
        status: HTTP status code
        body: Parsed JSON body, or None when the body was not JSON
        headers: Response headers
    """

    status: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class NetworkModule(Protocol):
    """Asynchronous GET/POST capability used by the engine."""

    async def get(
        self, url: str, options: NetworkRequestOptions | None = None
    ) -> NetworkResponse: ...

    async def post(
        self, url: str, options: NetworkRequestOptions | None = None
    ) -> NetworkResponse: ...


def _parse_body(response: httpx.Response) -> Any:
    """Return the JSON body, or None if the response is not JSON."""
    try:
        return response.json()
    except (ValueError, TypeError):
        return None


class HttpClient:
    """NetworkModule implementation using httpx.AsyncClient.

    A shared client may be injected (tests pass one built on
    httpx.MockTransport); otherwise a short-lived client is created per
    request and closed afterwards.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.http_client = http_client
        self.timeout = timeout

    async def get(
        self, url: str, options: NetworkRequestOptions | None = None
    ) -> NetworkResponse:
        return await self._send("GET", url, options)

    async def post(
        self, url: str, options: NetworkRequestOptions | None = None
    ) -> NetworkResponse:
        return await self._send("POST", url, options)

    async def _send(
        self, method: str, url: str, options: NetworkRequestOptions | None
    ) -> NetworkResponse:
        options = options or NetworkRequestOptions()
        client = self.http_client or httpx.AsyncClient(timeout=self.timeout)
        should_close = self.http_client is None

        logger.debug(f"{method} {url}")

        try:
            response = await client.request(
                method,
                url,
                headers=options.headers,
                content=options.body.encode("utf-8") if options.body is not None else None,
            )
            return NetworkResponse(
                status=response.status_code,
                body=_parse_body(response),
                headers=dict(response.headers),
            )
        except httpx.ConnectError as e:
            raise NetworkError(
                f"Could not connect to {url}: {e}. "
                f"Check that the URL is correct and the server is reachable."
            ) from e
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Timeout during {method} {url}: {e}. "
                f"The server may be slow or unresponsive."
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error during {method} {url}: {e}") from e
        finally:
            if should_close:
                await client.aclose()
