"""MCP tool surface."""

from chainagent.tools.server import TOOLS, ServerContext, build_toolkit, create_server
from chainagent.tools.toolkit import Toolkit

__all__ = [
    "TOOLS",
    "ServerContext",
    "Toolkit",
    "build_toolkit",
    "create_server",
]
