"""
Search Explanation Prompt Templates

System/Instruction/Context are kept separate so the output contract stays
visible in one place.
"""

from typing import Sequence

SYSTEM_PROMPT = """
You explain why videos from a lecture library match a learner's question.

Rules:
- Use only the video titles and content given below.
- "excerpt" must be copied verbatim from the video's content.
- Keep each rationale to one or two sentences.
- Reply with a JSON array only, no prose before or after it.
"""

INSTRUCTION_TEMPLATE = """
Learner's question: "{query}"

For every video in the list, briefly explain why it is relevant to the question
and quote the most relevant passage from its content.

Reply in this JSON format, one object per video, using the video's number as "index":
[{{"index": 1, "rationale": "why it is relevant", "excerpt": "quoted passage"}}]
"""

CONTEXT_ITEM_TEMPLATE = """{index}. Title: {title}
Content: {content}..."""


def build_search_explanation_prompt(
    *,
    query: str,
    candidates: Sequence[tuple[str, str]],
) -> str:
    """
    Args:
        query: The learner's query text
        candidates: (title, bounded content excerpt) pairs in ranked order
    """
    items = "\n\n".join(
        CONTEXT_ITEM_TEMPLATE.format(index=position, title=title, content=content)
        for position, (title, content) in enumerate(candidates, start=1)
    )
    instruction = INSTRUCTION_TEMPLATE.format(query=query)
    return f"{instruction}\nVideos:\n{items}"
