"""Field extraction for schema-unstable upstream payloads.

Upstream pool records have shipped the same quantity under many names
(``liquidity``, ``tvl``, ``stats.tvl``, ``liquidity.usd`` ...). Instead of
branching on API versions, every logical field is resolved through an
ordered list of candidate accessors:

- a flat key: ``"volume_24h"``
- a path of keys/indices: ``("stats", "volume", "h24")`` or ``("bins", 0)``

Coercion helpers turn whatever was found into a definite value or ``None``
(for strings/dates) or a caller-supplied default (for numbers). None of them
raise on bad data.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Union

Accessor = Union[str, int, tuple[Union[str, int], ...]]

_NUMERIC_CHARS = re.compile(r"[^0-9eE+\-.]")

# Epoch values above this are treated as milliseconds.
_EPOCH_MS_THRESHOLD = 1e11


def resolve(record: Any, accessor: Accessor) -> Any:
    """Walk ``accessor`` into ``record``. Returns None on any dead end."""
    path = accessor if isinstance(accessor, tuple) else (accessor,)
    current = record
    for step in path:
        if isinstance(current, Mapping):
            current = current.get(step)
        elif isinstance(step, int) and _is_sequence(current):
            if -len(current) <= step < len(current):
                current = current[step]
            else:
                return None
        else:
            return None
        if current is None:
            return None
    return current


def first_present(record: Any, candidates: Sequence[Accessor]) -> Any:
    """Return the first candidate value that resolves to something non-None."""
    for accessor in candidates:
        value = resolve(record, accessor)
        if value is not None:
            return value
    return None


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce numbers, big ints and numeric-looking strings to a finite float.

    ``"$1,234.50"`` → ``1234.5``. Anything unparsable or non-finite returns
    ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return default
        return number if math.isfinite(number) else default
    if isinstance(value, (str, bytes)):
        text = value.decode(errors="ignore") if isinstance(value, bytes) else value
        cleaned = _NUMERIC_CHARS.sub("", text)
        if not cleaned:
            return default
        try:
            number = float(cleaned)
        except ValueError:
            return default
        return number if math.isfinite(number) else default
    return default


def to_str(value: Any) -> str | None:
    """Trimmed string, or None when empty / not string-like."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        value = str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def to_iso_date(value: Any) -> str | None:
    """Parse an ISO string or epoch (s or ms) into a UTC ISO-8601 string."""
    parsed = to_datetime(value)
    return parsed.isoformat() if parsed is not None else None


def to_datetime(value: Any) -> datetime | None:
    """Timezone-aware datetime for ``value``, or None if it can't be parsed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _looks_numeric(text):
            return to_datetime(float(text))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # offsets that push the value past datetime.min/max
        return None


# ── Combined lookups ─────────────────────────────────────────────────


def pick_number(record: Any, candidates: Sequence[Accessor], default: float = 0.0) -> float:
    """First candidate holding a scalar, coerced with ``to_number``.

    Objects and arrays are skipped, so ``liquidity: {...}`` on one API
    generation doesn't shadow a later ``tvl`` candidate.
    """
    for accessor in candidates:
        value = resolve(record, accessor)
        if value is None or isinstance(value, Mapping) or _is_sequence(value):
            continue
        return to_number(value, default)
    return default


def pick_str(record: Any, candidates: Sequence[Accessor]) -> str | None:
    """First candidate that yields a non-empty string.

    Unlike ``first_present`` this keeps looking when a key exists but holds
    an empty string.
    """
    for accessor in candidates:
        text = to_str(resolve(record, accessor))
        if text is not None:
            return text
    return None


def pick_date(record: Any, candidates: Sequence[Accessor]) -> str | None:
    return to_iso_date(first_present(record, candidates))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _looks_numeric(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True
