"""Validation layer for raw LLM summary output.

Model output is free text; validation only strips wrapping code fences
and rejects blank responses so the caller can fall back.
"""

import re
from typing import Optional

_FENCE_PATTERN = re.compile(r"^```(?:[a-zA-Z]+)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


class SummaryValidationError(Exception):
    """Raised when a model response cannot be used as summary text.

    Attributes:
        field: Which output field failed ("detailed" or "summary").
        raw_response: The original string that failed validation.
    """

    def __init__(self, field: str, raw_response: str) -> None:
        self.field = field
        self.raw_response = raw_response
        super().__init__(f"LLM returned empty text for '{field}'.")


def _strip_markdown_fences(text: str) -> str:
    """Remove optional markdown code fences wrapping the response.

    Args:
        text: Raw LLM response string.

    Returns:
        The text with leading/trailing code fences removed, if present.
    """
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def validate_summary_text(raw_response: Optional[str], field: str) -> str:
    """Clean a raw response and ensure it carries text.

    Args:
        raw_response: The raw string returned by the LLM adapter.
        field: Output field the text is destined for, used in errors.

    Returns:
        The cleaned, non-empty text.

    Raises:
        SummaryValidationError: If nothing usable remains after cleaning.
    """
    cleaned = _strip_markdown_fences(raw_response or "")
    if not cleaned:
        raise SummaryValidationError(field=field, raw_response=raw_response or "")
    return cleaned
