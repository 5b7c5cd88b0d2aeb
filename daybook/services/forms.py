# daybook/services/forms.py
from __future__ import annotations

import datetime as dt
import html
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

_BRACKET_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


class InvalidRequest(Exception):
    """Input rejected before touching the database."""


class CsrfError(InvalidRequest):
    pass


def parse_form(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Form-encoded body -> nested dict, binding bracket keys the way the
    browser client serialises them:

      id[0]=3&id[1]=5                 -> {"id": ["3", "5"]}
      timeTaken[0][start]=09:00       -> {"timeTaken": [{"start": "09:00"}]}
      name=abc                        -> {"name": "abc"}

    Numeric segments become list positions (ordered by index, gaps dropped).
    """
    root: Dict[str, Any] = {}
    for key, value in items:
        m = _BRACKET_KEY.match(key)
        if not m:
            root[key] = value
            continue
        path = [m.group(1)] + _SEGMENT.findall(m.group(2))
        node = root
        for part, nxt in zip(path[:-1], path[1:]):
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value
    return {k: _listify(v) for k, v in root.items()}


def _listify(node: Any) -> Any:
    if not isinstance(node, dict):
        return node
    converted = {k: _listify(v) for k, v in node.items()}
    if converted and all(k.isdigit() for k in converted):
        return [converted[k] for k in sorted(converted, key=int)]
    return converted


def sanitize(value: Any) -> str:
    """HTML-escape text before it is stored (quotes included)."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidRequest("text field expected")
    return html.escape(value, quote=True)


def unescape(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return html.unescape(value)


def to_int(value: Any) -> Optional[int]:
    """Numeric string -> int, anything else -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    try:
        return int(value.strip())
    except ValueError:
        pass
    try:
        return int(float(value.strip()))
    except ValueError:
        return None


def require_int(value: Any) -> int:
    n = to_int(value)
    if n is None:
        raise InvalidRequest("integer field expected")
    return n


def require_text(value: Any, allow_empty: bool = False) -> str:
    text = sanitize(value)
    if value is None or (not allow_empty and text == ""):
        raise InvalidRequest("required text field missing")
    return text


def require_date(value: Any) -> dt.date:
    if not isinstance(value, str):
        raise InvalidRequest("date field missing")
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidRequest(f"invalid date: {value!r}") from e


def flag(value: Any) -> bool:
    # the client posts the literal "false" for unchecked boxes
    return value not in ("false", "0", None)


def id_list(value: Any) -> List[int]:
    """Single id or an id[i] array -> list of ints."""
    raw = value if isinstance(value, list) else [value]
    return [require_int(v) for v in raw]
