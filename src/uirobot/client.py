"""HTTP client for a running session API.

Lets scripts and the CLI drive a session served by ``uirobot.server``
without holding the TCP connection to the agent themselves.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class SessionClientError(Exception):
    """Raised when the session API cannot be reached or rejects a request."""

    def __init__(self, message: str, base_url: str = "") -> None:
        super().__init__(message)
        self.base_url = base_url


class HttpSessionClient:
    """Reads and writes session properties over the REST API.

    Example usage::

        async with HttpSessionClient("http://localhost:8080") as client:
            await client.send_keys("control+s")
            await client.launch("C:/Windows/notepad.exe|C:/Users/kiosk")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the HTTP client and verify the API is reachable."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            logger.info("Connected to session API at %s", self._base_url)
        except Exception as e:
            await self._client.aclose()
            self._client = None
            raise SessionClientError(
                f"Failed to connect to session API: {e}", base_url=self._base_url
            ) from e

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from session API")

    async def health(self) -> dict[str, Any]:
        resp = await self._request("GET", "/health")
        return resp.json()

    async def get_property(self, name: str) -> Any:
        resp = await self._request("GET", f"/properties/{name}")
        return resp.json()["value"]

    async def set_property(self, name: str, value: Any) -> Any:
        """Write a property and return its value after the write."""
        resp = await self._request("PUT", f"/properties/{name}", {"value": value})
        logger.debug("Set %s = %r", name, value)
        return resp.json()["value"]

    async def send_keys(self, combo: str) -> None:
        await self.set_property("key_down", combo)

    async def launch(self, program: str) -> None:
        await self.set_property("program", program)

    async def set_power(self, on: bool) -> None:
        await self.set_property("power", on)

    async def move_mouse(self, x: int, y: int) -> None:
        await self._request("POST", "/mouse/move", {"x": x, "y": y})

    async def _request(self, method: str, path: str, payload: dict | None = None) -> httpx.Response:
        if self._client is None:
            raise SessionClientError("Not connected to session API", base_url=self._base_url)
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
            return resp
        except httpx.HTTPError as e:
            raise SessionClientError(
                f"{method} {path} failed: {e}", base_url=self._base_url
            ) from e

    async def __aenter__(self) -> HttpSessionClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()
