"""Entry point: python -m funneldesign [serve]

- No args / "serve": MCP server on stdio
- "export <projectId> [json|markdown]": print a project export
"""

from __future__ import annotations

import asyncio
import logging
import sys

from funneldesign.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _run_serve() -> None:
    config = load_config()
    _setup_logging(config.log_level)

    from funneldesign.server import FunnelServer

    server = FunnelServer(config)
    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        pass


def _run_export(project_id: str, fmt: str) -> None:
    config = load_config()
    _setup_logging(config.log_level)

    from funneldesign.storage import ProjectNotFoundError, Storage

    storage = Storage.from_config(config)
    try:
        print(asyncio.run(storage.exporter.export(project_id, fmt)))
    except ProjectNotFoundError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "serve"

    if cmd == "serve":
        _run_serve()
    elif cmd == "export" and len(sys.argv) >= 3:
        fmt = sys.argv[3] if len(sys.argv) > 3 else "markdown"
        if fmt not in ("json", "markdown"):
            print(f"Unknown export format: {fmt}", file=sys.stderr)
            sys.exit(1)
        _run_export(sys.argv[2], fmt)
    else:
        print("Usage: python -m funneldesign [serve|export <projectId> [json|markdown]]")
        print("  serve   MCP server on stdio (default)")
        print("  export  Print a project as JSON or Markdown")
        sys.exit(1)


if __name__ == "__main__":
    main()
