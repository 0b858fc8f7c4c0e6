"""Application entry point for the ID document scanner API server."""

import argparse
from pathlib import Path

import uvicorn

from idscan.api.app import app, configure
from idscan.utils.config import load_config
from idscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Start the FastAPI application server.

    Host and port come from the ``server`` config section unless
    overridden on the command line.
    """
    parser = argparse.ArgumentParser(description="ID document scanner API server")
    parser.add_argument("--config", type=Path, help="Path to a YAML config file")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Bind port")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)
    host = args.host or config.server.host
    port = args.port or config.server.port
    configure(config)
    logger.info("Starting API server on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
