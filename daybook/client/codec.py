# daybook/client/codec.py
# form flattening + memo text codec
from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence


class PayloadError(ValueError):
    """A payload that must not be sent (e.g. parallel arrays of different lengths)."""


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def flatten_payload(payload: Mapping[str, Any]) -> Dict[str, str]:
    """
    Nested payload -> flat form fields, the bracket encoding the store parses:

      {"id": [3, 5]}                          -> id[0]=3, id[1]=5
      {"timeTaken": [{"start": "09:00"}]}     -> timeTaken[0][start]=09:00
      {"done": True}                          -> done=true
    """
    fields: Dict[str, str] = {}

    def walk(prefix: str, value: Any) -> None:
        if isinstance(value, Mapping):
            for key, sub in value.items():
                walk(f"{prefix}[{key}]", sub)
        elif isinstance(value, (list, tuple)):
            for i, sub in enumerate(value):
                walk(f"{prefix}[{i}]", sub)
        else:
            fields[prefix] = _scalar(value)

    for key, value in payload.items():
        walk(key, value)
    return fields


def encode_memo(text: str) -> str:
    """UTF-8 text -> base64, the form memo bodies are stored in."""
    return base64.b64encode((text or "").encode("utf-8")).decode("ascii")


def decode_memo(value: Optional[str]) -> str:
    # rows written before the encoding was introduced come back as plain text
    if not value:
        return ""
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return value


def build_sort_payload(
    table_type: str,
    ids: Sequence[int],
    sorts: Sequence[int],
    section_ids: Optional[Sequence[int]] = None,
) -> Dict[str, Any]:
    """Parallel `id` / `sort` (/ `sectionId`) arrays for one bulk sort request."""
    if len(ids) != len(sorts):
        raise PayloadError(f"id/sort length mismatch: {len(ids)} != {len(sorts)}")
    payload: Dict[str, Any] = {"tableType": table_type, "id": list(ids), "sort": list(sorts)}
    if section_ids is not None:
        if len(section_ids) != len(ids):
            raise PayloadError(f"id/sectionId length mismatch: {len(ids)} != {len(section_ids)}")
        payload["sectionId"] = list(section_ids)
    return payload
