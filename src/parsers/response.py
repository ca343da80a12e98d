"""Parsing of the model's JSON documentation reply.

Strips markdown code fences the model sometimes wraps around its
answer and validates the JSON object against the expected field set.
"""

import json
import logging
import re
from typing import Any

from src.parsers.structure import AnalysisResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "featureName",
    "plainEnglish",
    "description",
    "howItWorks",
    "technicalDetails",
    "errorHandling",
    "flowchart",
)

# Fields that must be plain JSON strings.
TEXT_FIELDS = ("featureName", "plainEnglish", "description", "howItWorks", "flowchart")

_OPENING_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


class ResponseParseError(ValueError):
    """Raised when a model reply cannot be turned into an AnalysisResult.

    Attributes:
        raw_text: The reply text after fence stripping.
    """

    def __init__(self, message: str, raw_text: str) -> None:
        """Initialize the error.

        Args:
            message: What is wrong with the reply.
            raw_text: The reply text after fence stripping.
        """
        super().__init__(message)
        self.raw_text = raw_text


def strip_code_fences(text: str) -> str:
    """Remove a leading and trailing markdown code fence.

    Args:
        text: Raw model output, e.g. a JSON object wrapped in ```json fences.

    Returns:
        The text between the fences, stripped of surrounding whitespace.
    """
    cleaned = text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_analysis(text: str) -> AnalysisResult:
    """Parse a model reply into an AnalysisResult.

    Args:
        text: Raw model output.

    Returns:
        The parsed analysis.

    Raises:
        ResponseParseError: If the reply is not JSON, is not an object,
            lacks a required field, or holds a field of the wrong type.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Failed to parse JSON: {e}", cleaned) from e

    if not isinstance(data, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(data).__name__}", cleaned
        )

    missing = [name for name in REQUIRED_FIELDS if name not in data]
    if missing:
        raise ResponseParseError(
            f"Response is missing fields: {', '.join(missing)}", cleaned
        )

    data = dict(data)
    for name in TEXT_FIELDS:
        if not isinstance(data[name], str):
            raise ResponseParseError(
                f"{name} must be a string, got {_json_type(data[name])}", cleaned
            )
    data["technicalDetails"] = _join_lines(data["technicalDetails"], cleaned)
    _check_error_entries(data["errorHandling"], cleaned)

    return AnalysisResult.from_dict(data)


def _json_type(value: Any) -> str:
    """Name the JSON type of a decoded value for error messages."""
    if value is None:
        return "null"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _join_lines(value: Any, raw_text: str) -> str:
    """Accept bullet details given either as text or as a list of strings.

    Raises:
        ResponseParseError: If the value is neither.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return "\n".join(value)
    raise ResponseParseError(
        "technicalDetails must be a string or an array of strings", raw_text
    )


def _check_error_entries(entries: Any, raw_text: str) -> None:
    """Validate the shape of the ``errorHandling`` array.

    Raises:
        ResponseParseError: If entries are not objects with both keys
            holding strings.
    """
    if not isinstance(entries, list):
        raise ResponseParseError("errorHandling must be an array", raw_text)
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or any(
            not isinstance(entry.get(key), str)
            for key in ("errorMessage", "explanation")
        ):
            raise ResponseParseError(
                f"errorHandling[{index}] must have string errorMessage "
                "and explanation",
                raw_text,
            )
