"""Entry point for `python -m ticktick_server`."""

import logging
import os
import sys

from ticktick_server.server import mcp

# stdout carries the stdio protocol, so logs go to stderr.
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)

transport = os.environ.get("MCP_TRANSPORT", "stdio")

if transport == "stdio":
    mcp.run(transport="stdio")
else:
    port = int(os.environ.get("PORT", "8000"))
    host = os.environ.get("HOST", "127.0.0.1")
    mcp.run(transport=transport, host=host, port=port)
