import json
import logging
import re
from typing import List

import demjson3
import json5
from pydantic import ValidationError

from errors import ResponseParseError
from models import CSSFixSet, DesignIssue

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


def _matching_close(text: str, start: int) -> int:
    """Index of the bracket closing ``text[start]``, or -1 when it never closes."""
    stack = []
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
            if not stack:
                return idx
    return -1


def extract_json_text(response_text: str) -> str:
    """Strip markdown code fences and any prose around the first JSON object or array."""
    text = response_text.strip()

    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1).strip()

    starts = [idx for idx in (text.find("{"), text.find("[")) if idx != -1]
    if not starts:
        return text

    start_idx = min(starts)
    end_idx = _matching_close(text, start_idx)
    if end_idx == -1:
        # Truncated output; leave the tail for the repair layers to reject
        return text[start_idx:]
    return text[start_idx : end_idx + 1]


# JSON Repair and Parsing Function
def repair_and_parse_json(response_text: str):
    """
    Parse completion output that is meant to be JSON but often is not quite.

    Tries, in order, until one succeeds:
    1. Standard json.loads()
    2. Clean common issues (trailing commas, comments)
    3. json5 parser (tolerates comments and trailing commas)
    4. demjson3 parser (auto-repairs many errors)

    Args:
        response_text: Raw text response from the completion service

    Returns:
        Parsed JSON value

    Raises:
        ResponseParseError: If all parsing attempts fail
    """
    text = extract_json_text(response_text)
    errors = []

    # Layer 1: Try standard JSON parser first
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        errors.append(f"Standard JSON: {str(e)}")

    # Layer 2: Clean common JSON mistakes
    try:
        cleaned = re.sub(r",(\s*[}\]])", r"\1", text)
        cleaned = re.sub(r"//[^\n\"]*\n", "\n", cleaned)
        cleaned = re.sub(r"/\*.*?\*/", "", cleaned, flags=re.DOTALL)
        result = json.loads(cleaned)
        logger.info("🔧 Completion JSON parsed after cleaning")
        return result
    except json.JSONDecodeError as e:
        errors.append(f"Cleaned JSON: {str(e)}")

    # Layer 3: Try json5 (tolerates trailing commas and comments)
    try:
        result = json5.loads(text)
        logger.info("🔧 Completion JSON parsed with json5")
        return result
    except ValueError as e:
        errors.append(f"JSON5: {str(e)}")

    # Layer 4: Try demjson3 (auto-repairs many JSON errors)
    try:
        result = demjson3.decode(text)
        logger.info("🔧 Completion JSON parsed with demjson3")
        return result
    except demjson3.JSONError as e:
        errors.append(f"DemJSON: {str(e)}")

    logger.error(f"❌ JSON parsing failed: {'; '.join(errors)}")
    logger.error(f"Response preview: {response_text[:200]}...")
    raise ResponseParseError(
        "Failed to parse AI response",
        details=f"Errors: {'; '.join(errors[:2])}",
    )


def parse_css_fix_set(response_text: str) -> CSSFixSet:
    """
    Parse a CSS fix response: a ``fixes`` array and an optional
    ``mediaQueries`` array, every entry field-checked.
    """
    data = repair_and_parse_json(response_text)

    if not isinstance(data, dict):
        raise ResponseParseError("Failed to parse AI response", details="Expected a JSON object")
    if not isinstance(data.get("fixes"), list):
        raise ResponseParseError(
            "Failed to parse AI response",
            details="Invalid response format: missing or invalid fixes array",
        )
    if data.get("mediaQueries") is None:
        data["mediaQueries"] = []
    if not isinstance(data["mediaQueries"], list):
        raise ResponseParseError(
            "Failed to parse AI response",
            details="Invalid response format: invalid mediaQueries array",
        )

    try:
        return CSSFixSet.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError("Failed to parse AI response", details=_describe(e))


def parse_design_issues(response_text: str) -> List[DesignIssue]:
    """Parse a design scan response: ``{"issues": [...]}`` or a bare array."""
    data = repair_and_parse_json(response_text)

    if isinstance(data, dict):
        if not isinstance(data.get("issues"), list):
            raise ResponseParseError(
                "Failed to parse AI response",
                details="Invalid response format: missing or invalid issues array",
            )
        data = data["issues"]
    if not isinstance(data, list):
        raise ResponseParseError(
            "Failed to parse AI response",
            details="Invalid response format: invalid issues array",
        )

    try:
        return [DesignIssue.model_validate(item) for item in data]
    except ValidationError as e:
        raise ResponseParseError("Failed to parse AI response", details=_describe(e))


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid response format: {location}: {first['msg']}"
