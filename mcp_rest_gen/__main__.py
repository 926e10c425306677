"""Entry point: python -m mcp_rest_gen

Reads an OpenAPI spec, generates a single-file MCP bridge server.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
