# agent/reply_parser.py
import json
import re
from typing import Any, Dict

from pydantic import ValidationError

from agent.errors import OutputSchemaMismatch

_FENCE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


def extract_json(text: str) -> Dict[str, Any]:
    """
    Pull one JSON object out of a model reply.

    Tries the whole reply, then a fenced ```json block, then the span from the
    first '{' to the last '}'. Raises OutputSchemaMismatch if none of them parse
    to an object.
    """
    s = (text or "").strip()
    if not s:
        raise OutputSchemaMismatch("empty reply")

    candidates = [s]
    m = _FENCE.search(s)
    if m:
        candidates.append(m.group(1))
    start, end = s.find("{"), s.rfind("}")
    if start != -1 and end > start:
        candidates.append(s[start:end + 1])

    for c in candidates:
        try:
            obj = json.loads(c)
        except ValueError:
            continue
        if isinstance(obj, dict):
            return obj
    raise OutputSchemaMismatch(f"no JSON object in reply: {s[:200]!r}")


def parse_reply(text: str, model_cls):
    """Parse a raw reply into `model_cls`, or raise OutputSchemaMismatch."""
    obj = extract_json(text)
    try:
        return model_cls.model_validate(obj)
    except ValidationError as e:
        raise OutputSchemaMismatch(f"{model_cls.__name__}: {e}") from e
