"""Extraction and validation of file lists from raw model output."""

import json
import re
from typing import Any, List

from ..core.errors import ParseError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

# One level of markdown fencing, with or without a language tag
_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n?(.*?)```", re.DOTALL)


def _fenced_list(text: str) -> Any:
    """Return the first list found inside any fenced block, in order."""
    for match in _FENCE_RE.finditer(text):
        body = match.group(1).strip()
        try:
            value = json.loads(body)
        except json.JSONDecodeError:
            value = _first_list(body)
        if isinstance(value, list):
            return value
    return None


def _first_list(text: str) -> Any:
    """Decode the first JSON array embedded in surrounding prose."""
    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, list):
                return value
        start = text.find("[", start + 1)
    return None


def parse_llm_response(raw_text: str) -> List[str]:
    """
    Extract the list of selected file paths from a model response.

    Handles:
    - Raw JSON arrays
    - JSON in a markdown code block, including a later block after
      non-JSON ones
    - An array embedded in surrounding prose

    An empty array is a valid answer ("nothing matched"). Anything else
    that does not yield a list of non-empty strings raises ParseError
    carrying the raw text.

    Raises:
        ParseError: If no valid list is found or an element is invalid.
    """
    if raw_text is None or not raw_text.strip():
        raise ParseError("Model response was empty", raw_text or "")

    text = raw_text.strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = _fenced_list(text)
        if parsed is None:
            parsed = _first_list(text)
        if parsed is None:
            logger.debug("No JSON array found in model response", extra={"raw_length": len(raw_text)})
            raise ParseError("Model response did not contain a JSON array of file paths", raw_text)

    if not isinstance(parsed, list):
        raise ParseError(
            f"Expected a JSON array of file paths, got {type(parsed).__name__}", raw_text
        )

    for index, item in enumerate(parsed):
        if not isinstance(item, str):
            raise ParseError(
                f"Element {index} is {type(item).__name__}, expected a file path string", raw_text
            )
        if not item:
            raise ParseError(f"Element {index} is an empty path", raw_text)

    return parsed
