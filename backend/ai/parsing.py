"""Lenient JSON extraction from model output."""
import json
import re
from typing import Any, Optional

FENCE_PATTERN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def _outer_json(text: str) -> str:
    """Cut text down to the outermost object or array, whichever opens first."""
    first_obj = text.find("{")
    first_arr = text.find("[")
    if first_arr != -1 and (first_obj == -1 or first_arr < first_obj):
        last_arr = text.rfind("]")
        if last_arr != -1:
            return text[first_arr:last_arr + 1]
    elif first_obj != -1:
        last_obj = text.rfind("}")
        if last_obj != -1:
            return text[first_obj:last_obj + 1]
    return text


def parse_json_from_response(text: Optional[str]) -> Any:
    """Parse a JSON payload out of free-form model text.

    Models wrap JSON in code fences, add a sentence after it, or write LaTeX
    with single backslashes. When the direct parse fails every backslash is
    doubled (tripled runs collapsed back) and the parse is retried. The repair
    is best effort; returns None when nothing parses.
    """
    if not text:
        return None

    clean = FENCE_PATTERN.sub("", text).strip()
    clean = _outer_json(clean)

    try:
        return json.loads(clean)
    except json.JSONDecodeError:
        pass

    fixed = clean.replace("\\", "\\\\").replace("\\\\\\", "\\\\")
    try:
        return json.loads(fixed)
    except json.JSONDecodeError:
        return None
