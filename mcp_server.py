#!/usr/bin/env python
"""
MCP Server Entry Point

Run this to start the MCP server over stdio:
    python mcp_server.py
"""

import asyncio

from mcp.server.stdio import stdio_server

from vidsearch.core.config import settings
from vidsearch.core.db import async_session_maker, close_db
from vidsearch.core.logging import configure_logging, get_logger
from vidsearch.embeddings import build_embedding_client
from vidsearch.llm import build_llm_client
from vidsearch.mcp.server import create_mcp_server

# Configure logging
configure_logging()
logger = get_logger(__name__)


async def main():
    logger.info("mcp_server_starting")

    embedding_client = build_embedding_client(settings)
    llm_client = build_llm_client(settings)
    server = create_mcp_server(
        config=settings,
        session_factory=async_session_maker,
        embedding_client=embedding_client,
        llm_client=llm_client,
    )

    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("mcp_server_running", transport="stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        await embedding_client.aclose()
        await llm_client.aclose()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
