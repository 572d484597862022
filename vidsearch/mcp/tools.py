"""
MCP Tool Implementations
Business logic for MCP tool calls
"""

import json

from vidsearch.core.config import Settings
from vidsearch.core.db import SessionFactory
from vidsearch.core.exceptions import VidSearchException
from vidsearch.core.logging import get_logger
from vidsearch.embeddings.protocol import EmbeddingClientProtocol
from vidsearch.llm.protocol import LLMClientProtocol
from vidsearch.services.search_service import SearchService

logger = get_logger(__name__)

MAX_TOOL_TOP_K = 20


async def search_videos_tool(
    *,
    config: Settings,
    session_factory: SessionFactory,
    embedding_client: EmbeddingClientProtocol,
    llm_client: LLMClientProtocol | None,
    query: str,
    top_k: int | None = None,
) -> str:
    """
    Run the search pipeline for an agent

    Anonymous: nothing is written to history.

    Args:
        config: Settings for timeouts, excerpt lengths and the default top_k
        query: Free-text question
        top_k: Number of results (default: search_top_k, max 20)

    Returns:
        JSON string with the ranked, explained results, or an error object
    """
    limit = config.search_top_k if top_k is None else max(1, min(int(top_k), MAX_TOOL_TOP_K))
    logger.info("mcp_search_videos", top_k=limit)

    async with session_factory() as session:
        service = SearchService.from_settings(
            config,
            session=session,
            embedding_client=embedding_client,
            llm_client=llm_client,
            top_k=limit,
        )
        try:
            response = await service.search(query)
        except VidSearchException as exc:
            return json.dumps({"error": {"code": exc.code, "message": exc.message}}, indent=2)

    return response.model_dump_json(indent=2)
