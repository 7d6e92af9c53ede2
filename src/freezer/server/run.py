"""Launch the freezer inventory API under uvicorn.

Configuration comes from the environment:

``FREEZER_SERVER_HOST`` / ``FREEZER_SERVER_PORT``
    Bind address, ``127.0.0.1:8000`` by default.
``RELOAD=1``
    Restart on code changes (development only).
``FREEZER_SERVER_DURATION``
    Stop after this many seconds; handy for smoke runs in CI.

Uvicorn's own logging setup and access log are disabled so every record goes
through the app's formatter and redaction filter, and requests are logged
once by the app middleware.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import uvicorn

APP_PATH = "freezer.server.app:app"


@dataclass(frozen=True)
class ServerOptions:
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False
    duration: Optional[float] = None

    def uvicorn_kwargs(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "log_config": None,
            "access_log": False,
        }


def _port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError as exc:
        raise SystemExit(f"FREEZER_SERVER_PORT must be an integer, got '{raw}'") from exc
    if not 0 < port < 65536:
        raise SystemExit(f"FREEZER_SERVER_PORT out of range: {port}")
    return port


def _duration(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError as exc:
        raise SystemExit(f"FREEZER_SERVER_DURATION must be a number, got '{raw}'") from exc
    if seconds <= 0:
        raise SystemExit("FREEZER_SERVER_DURATION must be positive")
    return seconds


def options_from_env(environ: Mapping[str, str] = os.environ) -> ServerOptions:
    """Read server options, exiting with a message on bad values."""

    options = ServerOptions(
        host=environ.get("FREEZER_SERVER_HOST") or "127.0.0.1",
        port=_port(environ.get("FREEZER_SERVER_PORT") or "8000"),
        reload=environ.get("RELOAD") == "1",
        duration=_duration(environ.get("FREEZER_SERVER_DURATION")),
    )
    if options.reload and options.duration is not None:
        raise SystemExit("FREEZER_SERVER_DURATION cannot be combined with RELOAD=1")
    return options


async def _serve_for(server: uvicorn.Server, seconds: float) -> None:
    serving = asyncio.ensure_future(server.serve())
    done, _ = await asyncio.wait({serving}, timeout=seconds)
    if not done:
        server.should_exit = True
    await serving


def main() -> None:
    """Entry point for the ``freezer-server`` script."""

    options = options_from_env()
    if options.reload:
        # Reload needs an import string so the worker can re-import the app.
        uvicorn.run(APP_PATH, reload=True, **options.uvicorn_kwargs())
        return

    server = uvicorn.Server(uvicorn.Config(APP_PATH, **options.uvicorn_kwargs()))
    if options.duration is None:
        server.run()
    else:
        asyncio.run(_serve_for(server, options.duration))


if __name__ == "__main__":
    main()
