"""Command-line entry point: validate configuration, then serve the app with uvicorn."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from mina_archive_mcp.config import load_config, set_default_config

logger = logging.getLogger("mina_archive_mcp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mina-archive-mcp",
        description="MCP server for the Mina archive node GraphQL API",
    )
    parser.add_argument("--name", help="Name of the MCP server (default: $MINA_MCP_SERVER_NAME or mcp-mina-archive-node)")
    parser.add_argument("--endpoint", help="Archive Node API endpoint (default: $MINA_ARCHIVE_ENDPOINT)")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(name=args.name, endpoint=args.endpoint)
    except ValueError as exc:
        print(f"Invalid config:\n  {exc}", file=sys.stderr)
        return 1
    # Installed before the server module builds its defaults from it.
    set_default_config(config)

    import uvicorn

    from mina_archive_mcp import server
    from mina_archive_mcp.archive_api import ArchiveGraphQLClient, set_default_client

    server.configure_logging(config.log_level, config.log_format)
    set_default_client(ArchiveGraphQLClient(config))
    server.app.state.config = config
    logger.info("Starting %s for archive node endpoint %s", config.server_name, config.endpoint)
    uvicorn.run(server.app, host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
