"""Fake stats endpoint for statwatch.

Serves scripted ``/_stats`` lines over plain HTTP/1.1 so the agent can be
run locally with either transport, and so the end-to-end tests have a real
peer to talk to.

Usage:
    python simulator/simulate.py                        # healthy feed on :8080
    python simulator/simulate.py --scenario overloaded
    python simulator/simulate.py --scenario flaky --port 9000
"""

from __future__ import annotations

import argparse
import asyncio
import itertools
import logging
from http import HTTPStatus

logger = logging.getLogger("simulator")


# ── Scenarios ────────────────────────────────────────

SCENARIOS: dict[str, list[str]] = {
    "healthy": ["10,1000,100,2000,100,500"],
    "overloaded": ["35,1000,850,2000,1950,500"],
    "malformed": ["35,1000,abc,2000,1950,500", "35,1000,850"],
    "network_saturated": ["5,1000,100,2000,100,125000000,120000000"],
    "flaky": [
        "10,1000,100,2000,100,500",
        "31.6,8589934592,7730941132,107374182400,102005473280,125000000",
        "oops",
    ],
}


class StatsServer:
    """Minimal HTTP server answering every request with the next scripted line.

    Lines are served in order and cycle. A non-200 ``status`` answers every
    request with that status instead, and ``drop_connections`` closes each
    connection without a response.
    """

    def __init__(
        self,
        lines: list[str],
        status: int = 200,
        host: str = "127.0.0.1",
        port: int = 0,
        drop_connections: bool = False,
    ) -> None:
        if not lines:
            raise ValueError("StatsServer needs at least one line to serve")
        self._lines = itertools.cycle(lines)
        self.status = status
        self.host = host
        self._port = port
        self.drop_connections = drop_connections
        self.requests = 0
        self._server: asyncio.Server | None = None

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._server is not None:
            return
        self._server = await asyncio.start_server(self._handle, self.host, self._port)
        self._port = self._server.sockets[0].getsockname()[1]
        logger.info("Stats server listening on %s:%d", self.host, self._port)

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Stats server stopped after %d requests", self.requests)

    async def __aenter__(self) -> StatsServer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    @property
    def port(self) -> int:
        return self._port

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self._port}"

    # ── internals ───────────────────────────────────────

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.requests += 1
        try:
            request_line = await reader.readline()
            while True:
                header = await reader.readline()
                if header in (b"\r\n", b"\n", b""):
                    break
            if self.drop_connections:
                return

            logger.debug("Request: %s", request_line.decode(errors="replace").strip())
            if self.status == 200:
                body = next(self._lines) + "\n"
            else:
                body = "error\n"
            reason = HTTPStatus(self.status).phrase
            payload = body.encode()
            writer.write(
                (
                    f"HTTP/1.1 {self.status} {reason}\r\n"
                    "Content-Type: text/plain\r\n"
                    f"Content-Length: {len(payload)}\r\n"
                    "Connection: close\r\n"
                    "\r\n"
                ).encode()
                + payload
            )
            await writer.drain()
        except ConnectionError:
            logger.debug("Client went away mid-request")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass


# ── Main runner ──────────────────────────────────────


async def serve(scenario: str, host: str, port: int, status: int) -> None:
    server = StatsServer(SCENARIOS[scenario], status=status, host=host, port=port)
    await server.start()
    logger.info("Serving scenario %r at %s/_stats", scenario, server.base_url)
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    parser = argparse.ArgumentParser(description="statwatch stats endpoint simulator")
    parser.add_argument("--scenario", choices=list(SCENARIOS.keys()), default="healthy")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--status", type=int, default=200, help="HTTP status to answer with")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [SIM] %(message)s")
    try:
        asyncio.run(serve(args.scenario, args.host, args.port, args.status))
    except KeyboardInterrupt:
        logger.info("Simulator finished")


if __name__ == "__main__":
    main()
