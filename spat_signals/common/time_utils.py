"""Transmission-time parsing, tick conversion and KST formatting.

Everything here is total over its input: malformed values degrade to ``None``
or ``0`` instead of raising.
"""

from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from spat_signals.common.constants import KST_OFFSET_MS


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def utc_now_ms() -> float:
    return time.time() * 1000.0


def _to_number(value: Any) -> float | None:
    # bool is an int subclass; a flag is never a tick count or timestamp.
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        # float() reads digit separators such as "1_0"; upstream numbers never carry them.
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def timing_raw_to_seconds(raw: Any) -> float | None:
    """Upstream counters are tenths of a second."""
    number = _to_number(raw)
    if number is None:
        return None
    return number / 10


def round1(value: float) -> float:
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _parse_iso_ms(text: str) -> float | None:
    cleaned = text.strip()
    if cleaned.endswith("Z") or cleaned.endswith("z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000.0


def parse_transmission_time_ms(record: Mapping[str, Any] | None) -> float:
    """Return the record's transmission epoch in ms, or ``0`` when it has none.

    ``trsmUtcTime`` wins when it is a positive number; otherwise ``regDt`` is
    accepted as a positive epoch value or an ISO-8601 string.
    """
    if not isinstance(record, Mapping):
        return 0

    primary = _to_number(record.get("trsmUtcTime"))
    if primary is not None and primary > 0:
        return primary

    fallback = record.get("regDt")
    if isinstance(fallback, str):
        as_number = _to_number(fallback)
        if as_number is not None and as_number > 0:
            return as_number
        parsed = _parse_iso_ms(fallback)
        if parsed is not None and parsed > 0:
            return parsed
        return 0

    as_number = _to_number(fallback)
    if as_number is not None and as_number > 0:
        return as_number
    return 0


def _format_kst(epoch_ms: float, with_ms: bool) -> str:
    shifted_ms = int(round(epoch_ms)) + KST_OFFSET_MS
    # Formatting the shifted instant as UTC keeps the host timezone out of it.
    stamp = datetime.fromtimestamp(shifted_ms // 1000, tz=timezone.utc)
    base = stamp.strftime("%Y-%m-%d %H:%M:%S")
    if not with_ms:
        return base
    return f"{base}.{shifted_ms % 1000:03d}"


def to_kst_string(epoch_ms: float | None, *, with_ms: bool = True) -> str | None:
    if not epoch_ms:
        return None
    try:
        return _format_kst(epoch_ms, with_ms)
    except (OverflowError, OSError, ValueError):
        return None


def now_kst_string(*, with_ms: bool = False, now_ms: float | None = None) -> str:
    current = utc_now_ms() if now_ms is None else now_ms
    return _format_kst(current, with_ms)
