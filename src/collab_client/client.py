"""HTTP client adapter for the collaboration backend."""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from collab_client.errors import TransportError

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Session:
    """Authenticated caller context, passed explicitly to every request."""

    token: str | None = None
    user_id: int | None = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


class ApiClient:
    """Thin wrapper over httpx that attaches bearer tokens and raises TransportError.

    The adapter performs no retries; callers decide what to do with failures.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the backend API
            timeout: Request timeout in seconds; expiry is reported as a transport failure
            transport: Optional httpx transport (used by tests)
        """
        if not base_url:
            raise ValueError("API base URL required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        logger.debug("API client initialized", base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _headers(self, session: Session | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if session is not None and session.token:
            headers["Authorization"] = f"Bearer {session.token}"
        return headers

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """Parse a response body as JSON, wrapping raw text as ``{"error": text}``."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return {"error": response.text}

    def send(
        self,
        method: str,
        path: str,
        session: Session | None,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        """Perform one HTTP request and return the status code with the parsed body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            session: Caller session providing the bearer token
            json: Optional JSON body
            params: Optional query string parameters

        Returns:
            Tuple of (status code, parsed JSON body or None for an empty body)

        Raises:
            TransportError: On a network failure, timeout, or non-2xx status
        """
        logger.debug("Sending request", method=method, path=path, params=params)
        try:
            response = self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._headers(session),
            )
        except httpx.TimeoutException as e:
            logger.error("Request timed out", method=method, path=path, timeout=self.timeout)
            raise TransportError(None, {"error": f"Request timed out after {self.timeout:g}s"}) from e
        except httpx.HTTPError as e:
            logger.error("Request failed", method=method, path=path, error=str(e))
            raise TransportError(None, {"error": str(e)}) from e

        body = self._parse_body(response)
        if not response.is_success:
            logger.warning("Request returned error status", method=method, path=path, status=response.status_code)
            raise TransportError(response.status_code, body)

        logger.debug("Request completed", method=method, path=path, status=response.status_code)
        return response.status_code, body

    def request(
        self,
        method: str,
        path: str,
        session: Session | None,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one HTTP request and return only the parsed body."""
        _, body = self.send(method, path, session, json=json, params=params)
        return body
