import json
from typing import Any, Type, TypeVar
from pydantic import TypeAdapter, ValidationError
from ..errors import ResponseParseError

T = TypeVar("T")


def strip_code_fences(text: str) -> str:
    t = (text or "").strip()
    if t.startswith("```"):
        parts = t.split("\n", 1)
        if len(parts) == 2:
            t = parts[1]
        if t.endswith("```"):
            t = t[:-3]
    if t.startswith("json\n"):
        t = t[5:]
    return t.strip()


def _extract_balanced(text: str, opener: str, closer: str) -> str | None:
    start = text.find(opener)
    if start == -1:
        return None
    depth = 0
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
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start:idx + 1]
    return None


def load_json_payload(raw: str) -> Any:
    """Decode model output, tolerating code fences and chatter around the JSON."""
    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ResponseParseError("payload_empty")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass
    pairs = [("{", "}"), ("[", "]")]
    # whichever container opens first is the outermost one
    pairs.sort(key=lambda p: cleaned.find(p[0]) if p[0] in cleaned else len(cleaned))
    for opener, closer in pairs:
        sliced = _extract_balanced(cleaned, opener, closer)
        if sliced:
            try:
                return json.loads(sliced)
            except json.JSONDecodeError:
                continue
    raise ResponseParseError("payload_unparseable")


def parse_structured(raw: str, shape: Type[T]) -> T:
    """Validate model output against a pydantic model or any type TypeAdapter understands."""
    payload = load_json_payload(raw)
    try:
        return TypeAdapter(shape).validate_python(payload)
    except ValidationError as exc:
        raise ResponseParseError(f"payload_invalid: {exc.error_count()} error(s)") from exc
