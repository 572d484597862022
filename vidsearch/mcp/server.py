"""
MCP Server Implementation
Exposes video search to MCP-capable agents
"""

from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from vidsearch.core.config import Settings
from vidsearch.core.db import SessionFactory
from vidsearch.core.logging import get_logger
from vidsearch.embeddings.protocol import EmbeddingClientProtocol
from vidsearch.llm.protocol import LLMClientProtocol
from vidsearch.mcp.tools import MAX_TOOL_TOP_K, search_videos_tool

logger = get_logger(__name__)


def create_mcp_server(
    *,
    config: Settings,
    session_factory: SessionFactory,
    embedding_client: EmbeddingClientProtocol,
    llm_client: LLMClientProtocol | None,
) -> Server:
    """
    Create MCP server with the search tool

    Provider handles are built by the caller and shared across tool calls.

    Returns:
        MCP Server instance with registered tools
    """
    server = Server("vidsearch-mcp-server")

    logger.info("mcp_server_creating")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [
            Tool(
                name="search_videos",
                description=(
                    "Semantic search over video lectures. Returns the best matching videos "
                    "with a similarity score, a short rationale and a relevant transcript excerpt."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Free-text question",
                        },
                        "top_k": {
                            "type": "number",
                            "description": f"Number of results to return (default: {config.search_top_k}, max: {MAX_TOOL_TOP_K})",
                            "default": config.search_top_k,
                        },
                    },
                    "required": ["query"],
                },
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """
        Handle tool calls from the agent

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            List of text content responses
        """
        logger.info("mcp_tool_called", tool_name=name)

        try:
            if name == "search_videos":
                result = await search_videos_tool(
                    config=config,
                    session_factory=session_factory,
                    embedding_client=embedding_client,
                    llm_client=llm_client,
                    query=arguments.get("query", ""),
                    top_k=arguments.get("top_k"),
                )
            else:
                raise ValueError(f"Unknown tool: {name}")

            return [TextContent(type="text", text=result)]

        except Exception as e:
            logger.error("mcp_tool_error", tool_name=name, error=str(e))
            return [TextContent(type="text", text=f"Error: {str(e)}")]

    logger.info("mcp_server_created", tools_count=1)

    return server
