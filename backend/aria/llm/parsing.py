"""Helpers for pulling JSON out of model responses."""

import json
import re
from typing import Any

from ..errors import ParseError

_FENCE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def _candidates(text: str) -> list[str]:
    fenced = [m.group(1).strip() for m in _FENCE.finditer(text)]
    return fenced + [text]


def _extract(text: str, opener: str, closer: str, kind: str) -> Any:
    for candidate in _candidates(text or ""):
        start = candidate.find(opener)
        end = candidate.rfind(closer)
        if start == -1 or end <= start:
            continue
        try:
            return json.loads(candidate[start : end + 1])
        except json.JSONDecodeError:
            continue
    raise ParseError(f"No JSON {kind} found in model response")


def extract_json_object(text: str) -> dict[str, Any]:
    """Return the first ``{...}`` span in ``text`` parsed as a dict.

    Markdown code fences are tolerated.

    Raises:
        ParseError: If no parseable object is present
    """
    return _extract(text, "{", "}", "object")


def extract_json_array(text: str) -> list[Any]:
    """Return the first ``[...]`` span in ``text`` parsed as a list.

    Raises:
        ParseError: If no parseable array is present
    """
    return _extract(text, "[", "]", "array")
