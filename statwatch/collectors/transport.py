from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx

from statwatch.models.errors import BadStatusError, FetchConnectionError

logger = logging.getLogger(__name__)


class StatsTransport(ABC):
    """One request/response round trip to the stats endpoint.

    Implementations open exactly one connection per ``fetch_line()`` call
    and release it on every exit path.
    """

    name: str = "base"

    def __init__(self, path: str = "/_stats", timeout: float = 10.0) -> None:
        self.path = path
        self.timeout = timeout

    @abstractmethod
    async def fetch_line(self) -> str:
        """Return the first line of the response body, whitespace stripped."""
        ...


class HttpTransport(StatsTransport):
    name = "http"

    def __init__(
        self,
        base_url: str,
        path: str = "/_stats",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(path=path, timeout=timeout)
        self.base_url = base_url
        self._transport = transport

    async def fetch_line(self) -> str:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(self.path)
        except httpx.RequestError as exc:
            raise FetchConnectionError(f"request failed: {exc!r}") from exc

        if response.status_code != 200:
            raise BadStatusError(response.status_code)
        lines = response.text.splitlines()
        return lines[0].strip() if lines else ""


class SocketTransport(StatsTransport):
    """Speaks just enough HTTP/1.1 over a raw TCP stream."""

    name = "socket"

    def __init__(
        self,
        host: str,
        port: int = 80,
        path: str = "/_stats",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(path=path, timeout=timeout)
        self.host = host
        self.port = port

    def _request(self) -> bytes:
        return (
            f"GET {self.path} HTTP/1.1\r\n"
            f"Host: {self.host}\r\n"
            "Connection: close\r\n"
            "\r\n"
        ).encode("ascii")

    async def fetch_line(self) -> str:
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
        except (OSError, asyncio.TimeoutError) as exc:
            raise FetchConnectionError(f"connection failed: {exc!r}") from exc

        try:
            writer.write(self._request())
            await asyncio.wait_for(writer.drain(), timeout=self.timeout)

            status_line = await self._readline(reader, "status")
            if "200 OK" not in status_line:
                raise BadStatusError(status_line.strip())

            while True:
                header = await self._readline(reader, "headers")
                if header in ("\r\n", "\n"):
                    break

            body = await self._readline(reader, "body")
            return body.strip()
        except (OSError, asyncio.TimeoutError) as exc:
            raise FetchConnectionError(f"read failed: {exc!r}") from exc
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                logger.debug("Socket to %s:%d closed uncleanly", self.host, self.port)

    async def _readline(self, reader: asyncio.StreamReader, what: str) -> str:
        try:
            raw = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
        except ValueError as exc:
            # line longer than the StreamReader limit
            raise FetchConnectionError(f"read {what} failed: {exc}") from exc
        if not raw:
            raise FetchConnectionError(f"read {what} failed: connection closed")
        return raw.decode("utf-8", errors="replace")
