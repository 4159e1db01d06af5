"""LLM utility functions.

Handles compatibility with reasoning models (DeepSeek-R1 and friends)
that put their chain-of-thought in `reasoning_content` or inline
`<think>` blocks instead of the answer text.
"""

import re

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)


def strip_think_blocks(text: str) -> str:
    """Remove inline reasoning blocks, keeping only the answer."""
    return _THINK_BLOCK.sub("", text).strip()


def get_llm_content(message) -> str:
    """
    Extract content from LLM response message.

    Args:
        message: OpenAI-compatible message object with content attribute

    Returns:
        Answer text, falling back to reasoning_content if content is empty
    """
    content = getattr(message, 'content', None) or ""

    if not content:
        content = getattr(message, 'reasoning_content', None) or ""

    return strip_think_blocks(content)
