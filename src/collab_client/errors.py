"""Error taxonomy for the collaboration client."""

from dataclasses import dataclass
from typing import Any


class CollabError(Exception):
    """Base class for client errors."""


class ValidationError(CollabError):
    """Local form validation failure; never reaches the network layer."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{name}: {message}" for name, message in self.errors.items()))


class TransportError(CollabError):
    """Network failure or non-2xx response.

    Args:
        status: HTTP status code, or None when no response was received
        body: Parsed JSON body, or ``{"error": <text>}`` when parsing failed
    """

    def __init__(self, status: int | None, body: Any = None) -> None:
        self.status = status
        self.body = body
        super().__init__(self._describe())

    def _describe(self) -> str:
        detail = self.server_message() or "no details"
        if self.status is None:
            return f"Request failed: {detail}"
        return f"HTTP {self.status}: {detail}"

    def server_message(self) -> str | None:
        """Return the backend's own message when the body carries one."""
        body = self.body
        if isinstance(body, dict):
            for key in ("message", "error", "detail"):
                value = body.get(key)
                if isinstance(value, str) and value.strip():
                    return value
            return None
        if isinstance(body, str) and body.strip():
            return body
        return None

    def user_message(self, default: str) -> str:
        """Message to show the user: the server's when present, else ``default``."""
        return self.server_message() or default


class UnexpectedEmptyResponse(TransportError):
    """2xx response without a usable entity payload."""

    def __init__(self, status: int | None = None, body: Any = None) -> None:
        super().__init__(status, body)

    def _describe(self) -> str:
        return f"Empty response from server (status {self.status})"

    def server_message(self) -> str | None:
        return None


@dataclass
class ReconciliationWarning:
    """Non-fatal notice that the server dropped a field and the value is kept locally."""

    entity_id: int
    field: str
    value: Any
    message: str
