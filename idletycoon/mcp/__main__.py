"""CLI entry point: python -m idletycoon.mcp <store_dir>"""

from __future__ import annotations

import sys


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python -m idletycoon.mcp <store_dir>", file=sys.stderr)
        print("Example: python -m idletycoon.mcp .idletycoon", file=sys.stderr)
        sys.exit(1)

    from idletycoon.logging import setup_logging

    # stdout carries the MCP protocol
    setup_logging(stream=sys.stderr)

    from idletycoon.mcp.server import create_server
    from idletycoon.store import FileKeyValueStore, GameStore

    server = create_server(GameStore(FileKeyValueStore(sys.argv[1])))
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
