"""
MCP Server for VidSearch
Exposes video search to agents via Model Context Protocol
"""

from vidsearch.mcp.server import create_mcp_server

__all__ = ["create_mcp_server"]
