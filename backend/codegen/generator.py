"""
Code generation using Claude AI
"""

import os
import re
import logging
from typing import Optional
from anthropic import Anthropic

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-20241022"
MAX_TOKENS = 2048

# First fenced block; the optional info string (```python) is not part of the code
CODE_BLOCK_RE = re.compile(r'```(?:[^\n`]*\n)?(.*?)```', re.DOTALL)


class GenerationError(Exception):
    """Raised when the text generation service cannot produce code"""


def extract_code_block(text: str) -> str:
    """
    Extract the code from a model reply

    Args:
        text: Raw reply text

    Returns:
        Body of the first fenced block, or the whole reply when it has none
    """
    match = CODE_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def build_prompt(query: str, language: str) -> str:
    return f"Generate {language} code for the following task: {query}"


def generate_code(query: str, language: str, client: Optional[Anthropic] = None) -> str:
    """
    Ask Claude for code that solves a task

    Args:
        query: Task description
        language: Target language name
        client: Anthropic client (created from CLAUDE_API_KEY if omitted)

    Returns:
        Extracted source code

    Raises:
        GenerationError: If the API key is missing or the call fails
    """
    if client is None:
        claude_api_key = os.getenv("CLAUDE_API_KEY")
        if not claude_api_key:
            raise GenerationError("CLAUDE_API_KEY not configured")
        client = Anthropic(api_key=claude_api_key)

    model = os.getenv("CODEGEN_MODEL", DEFAULT_MODEL)
    logger.info(f"Generating {language} code with {model}")

    try:
        response = client.messages.create(
            model=model,
            max_tokens=MAX_TOKENS,
            messages=[{"role": "user", "content": build_prompt(query, language)}]
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
    except Exception as e:
        logger.error(f"Error calling Claude for code generation: {e}", exc_info=True)
        raise GenerationError(str(e)) from e

    return extract_code_block(text)
