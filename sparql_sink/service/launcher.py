"""
Sink launcher with 4 modes:

1) default: load config + namespaces, then serve HTTP on SERVICE_PORT.
2) --mcp: same bootstrap, then serve the MCP tools over stdio.
3) --check: bootstrap, print the (masked) config and namespace count, exit.
4) --expand <curie>: bootstrap, print the expanded URI, exit.

Examples:
  sparql-sink
  sparql-sink --check
  sparql-sink --expand ex:Foo
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from ..config.settings import Settings, load_settings
from ..context import SinkContext, bootstrap
from ..errors import MalformedEntityError, StartupError

log = logging.getLogger("sparql_sink")


def configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] sparql_sink: %(message)s",
    )


def _serve_http(ctx: SinkContext, settings: Settings) -> None:
    from .http_app import create_app

    uvicorn.run(
        create_app(ctx),
        host=settings.service.host,
        port=settings.service.port,
        log_level=logging.getLevelName(settings.log_level).lower(),
    )


def _serve_mcp(ctx: SinkContext) -> None:
    from .mcp_server import create_mcp

    create_mcp(ctx).run()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="SPARQL sink service")
    parser.add_argument("--mcp", action="store_true", help="Serve MCP tools over stdio instead of HTTP")
    parser.add_argument("--check", action="store_true", help="Load config and namespaces, print a summary and exit")
    parser.add_argument("--expand", type=str, help="Expand a CURIE with the loaded namespaces and exit")
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(settings.log_level)
    log.info("Starting SPARQL Sink")

    try:
        ctx = bootstrap(settings)
    except StartupError as e:
        log.critical("Startup failed, not serving: %s", e)
        return 1

    if args.check:
        print(json.dumps({"settings": settings.as_dict(), "namespaces": len(ctx.namespaces)}, indent=2))
        return 0

    if args.expand:
        try:
            print(ctx.namespaces.expand(args.expand))
        except MalformedEntityError as e:
            print(json.dumps({"ok": False, "error": str(e)}))
            return 2
        return 0

    if args.mcp:
        _serve_mcp(ctx)
    else:
        _serve_http(ctx, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
