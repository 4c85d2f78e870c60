"""
Response Parsing Module for Phish-Lens

Turns the raw text reply of the model into a JSON object candidate.

Accepted reply shapes (after which the text must be a single JSON object):
    {"confidence": 85, ...}                  bare JSON
    ```json\\n{"confidence": 85, ...}\\n```    fenced, with a language tag
    ```\\n{"confidence": 85, ...}\\n```        fenced, without a tag
Any of these may carry leading or trailing whitespace and newlines.

Parsing fails closed: a reply that is not a JSON object raises ParseError and
never yields a default verdict.
"""

import json
import re
from typing import Dict

from error_handling import ParseError, UpstreamFailure, error_handler


# Reply text that signals the upstream gave up instead of analyzing
UPSTREAM_FAILURE_SENTINEL = "Error analyzing email"

# A run of three or more backticks plus an optional language tag
FENCE_PATTERN = re.compile(r"`{3,}[A-Za-z0-9_+\-]*")


def is_upstream_failure(text: str) -> bool:
    return text == UPSTREAM_FAILURE_SENTINEL


def sanitize(raw: str) -> str:
    """
    Strip code-fence markers and surrounding whitespace from a model reply.

    Fence markers are removed wherever they occur. The sentinel is returned
    unchanged. Sanitizing an already sanitized string returns it as is.
    """
    if is_upstream_failure(raw):
        return raw
    return FENCE_PATTERN.sub("", raw).strip()


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_verdict(sanitized: str) -> Dict:
    """
    Deserialize a sanitized reply into a verdict candidate.

    Args:
        sanitized: Output of sanitize()

    Returns:
        The decoded JSON object (not yet validated)

    Raises:
        UpstreamFailure: the reply is the upstream-failure sentinel
        ParseError: the reply is not a JSON object
    """
    if is_upstream_failure(sanitized):
        raise UpstreamFailure("The AI service could not analyze this email")

    try:
        candidate = json.loads(sanitized, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        error_handler.logger.warning(f"Unparseable model reply ({e}): {sanitized!r}")
        raise ParseError(f"Reply is not valid JSON: {e}", text=sanitized) from e

    if not isinstance(candidate, dict):
        error_handler.logger.warning(f"Model reply is not a JSON object: {sanitized!r}")
        raise ParseError(
            f"Reply must be a JSON object, got {type(candidate).__name__}",
            text=sanitized,
        )

    return candidate


def parse_reply(raw: str) -> Dict:
    """Sanitize and parse a raw model reply in one step"""
    return parse_verdict(sanitize(raw))
