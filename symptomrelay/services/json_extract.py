"""Pull the JSON object out of free-form model text."""

import json
from typing import Any, Optional

from symptomrelay.errors import MalformedUpstreamOutput


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in ``text``, or None.

    Braces inside JSON string literals do not count toward the balance, so
    a summary such as ``"use {brand} cream"`` does not end the span early.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    return None


def parse_json_object(text: str) -> dict[str, Any]:
    """Locate and decode the JSON object embedded in a completion.

    Raises:
        MalformedUpstreamOutput: no balanced object exists, it is not valid JSON,
            or it nests too deeply to decode.
    """
    candidate = find_json_object(text)
    if candidate is None:
        raise MalformedUpstreamOutput()

    try:
        parsed = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError) as e:
        raise MalformedUpstreamOutput() from e

    if not isinstance(parsed, dict):
        raise MalformedUpstreamOutput()
    return parsed
