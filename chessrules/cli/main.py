from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from ..config import load_settings
from ..protocol.http.app import create_app


def main(argv: Optional[List[str]] = None) -> None:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Serve the chess rules HTTP API")
    parser.add_argument("--host", type=str, default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument(
        "--log-level", type=str, default=settings.log_level, help="Logging level (default: INFO)"
    )
    args = parser.parse_args(argv)

    settings = settings.model_copy(
        update={"host": args.host, "port": args.port, "log_level": args.log_level.upper()}
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
