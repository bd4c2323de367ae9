"""Collection locator — find the record array inside an arbitrary payload.

Upstream has returned a bare list, ``{"data": [...]}``, ``{"data":
{"pools": [...]}}`` and more. Wrapper keys are probed in order and the first
non-empty array wins.
"""

from __future__ import annotations

from typing import Any

WRAPPER_KEYS: tuple[str, ...] = (
    "data",
    "items",
    "results",
    "pairs",
    "pools",
    "records",
)


def locate_records(payload: Any, wrapper_keys: tuple[str, ...] = WRAPPER_KEYS) -> list[Any]:
    """Return the first non-empty record list found in ``payload``, else []."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for key in wrapper_keys:
        nested = payload.get(key)
        if not isinstance(nested, (dict, list)):
            continue
        found = locate_records(nested, wrapper_keys)
        if found:
            return found
    return []
