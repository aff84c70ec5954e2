"""Synchronous HTTP client for the local XPipe API.

One handshake per process; the session token it returns is sent as a bearer
token on every later call. Each endpoint maps failures onto its own error
type so callers can decide how to degrade:

  /handshake            -> AuthError
  /connection/query     -> FetchError
  /connection/info      -> FetchError
  /connection/terminal  -> LaunchError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import DEFAULT_API_URL, DEFAULT_CLIENT_NAME, DEFAULT_TIMEOUT
from .models import CatalogueFilters

logger = logging.getLogger(__name__)


class XPipeError(Exception):
    """XPipe API request failed with structured error info."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message


class AuthError(XPipeError):
    """Handshake failed: missing key, network failure or bad payload."""


class FetchError(XPipeError):
    """Connection query or info request failed."""


class LaunchError(XPipeError):
    """Terminal launch request failed or was rejected."""


class XPipeClient:
    """Blocking client for the XPipe HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client_name: str = DEFAULT_CLIENT_NAME,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: XPipe API address
            timeout: Timeout in seconds applied to every request
            client_name: Name announced to XPipe during the handshake
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url
        self.client_name = client_name
        self.session_token: str | None = None
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    @property
    def is_authenticated(self) -> bool:
        return self.session_token is not None

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> XPipeClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, path: str, body: dict[str, Any], error_cls: type[XPipeError], auth: bool = True) -> httpx.Response:
        headers: dict[str, str] = {}
        if auth:
            if not self.is_authenticated:
                raise error_cls(f"Not authenticated, cannot call {path}")
            headers["Authorization"] = f"Bearer {self.session_token}"

        try:
            resp = self._http.post(path, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise error_cls(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            raise error_cls(f"Request to {path} failed: {e}") from e

        if not resp.is_success:
            detail = resp.text
            logger.debug(f"{path} returned {resp.status_code}: {detail}")
            raise error_cls(f"{path} returned {resp.status_code}", status_code=resp.status_code, detail=detail)
        return resp

    @staticmethod
    def _json(resp: httpx.Response, error_cls: type[XPipeError]) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise error_cls(f"Invalid JSON from {resp.request.url.path}", detail=resp.text) from e
        if not isinstance(data, dict):
            raise error_cls(f"Unexpected payload from {resp.request.url.path}", detail=resp.text)
        return data

    def authenticate(self, api_key: str) -> str:
        """Perform the handshake and keep the returned session token.

        Raises:
            AuthError: empty key, network failure or malformed response.
        """
        if not api_key:
            raise AuthError("No API key configured")

        body = {
            "auth": {"type": "ApiKey", "key": api_key},
            "client": {"type": "Api", "name": self.client_name},
        }
        resp = self._post("/handshake", body, AuthError, auth=False)
        data = self._json(resp, AuthError)
        token = data.get("sessionToken")
        if not isinstance(token, str) or not token:
            raise AuthError("Handshake response has no sessionToken", detail=resp.text)

        self.session_token = token
        logger.info(f"Authenticated against {self.base_url} as {self.client_name}")
        return token

    def query_connections(self, filters: CatalogueFilters | None = None) -> list[str]:
        """Return identifiers of all connections matching the filters."""
        filters = filters or CatalogueFilters()
        resp = self._post("/connection/query", filters.to_payload(), FetchError)
        data = self._json(resp, FetchError)
        found = data.get("found")
        if not isinstance(found, list) or not all(isinstance(c, str) for c in found):
            raise FetchError("Query response has no list of identifiers", detail=resp.text)
        return found

    def connection_info(self, connections: list[str]) -> list[dict[str, Any]]:
        """Return one info dict per identifier, in request order."""
        resp = self._post("/connection/info", {"connections": connections}, FetchError)
        data = self._json(resp, FetchError)
        infos = data.get("infos")
        if not isinstance(infos, list) or not all(isinstance(i, dict) for i in infos):
            raise FetchError("Info response has no list of infos", detail=resp.text)
        return infos

    def open_terminal(self, connection: str, directory: str = "/") -> None:
        """Ask XPipe to open a terminal session for a connection.

        Raises:
            LaunchError: request failed; ``detail`` holds the response body.
        """
        self._post("/connection/terminal", {"connection": connection, "directory": directory}, LaunchError)
        logger.info(f"Opened terminal for {connection}")
