"""JSON parsing helpers."""

from __future__ import annotations

import json


def parse_string_mapping(text: str) -> dict[str, str]:
    """
    Parse a JSON object of scalar values into a str -> str mapping.
    Used for header blocks that users type by hand.
    """
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Expected a JSON object.")
    out: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, (dict, list)) or value is None:
            raise ValueError(f"Value for {key!r} must be a string.")
        out[str(key)] = value if isinstance(value, str) else json.dumps(value)
    return out
