"""Remaining-time extraction with latency correction."""

from __future__ import annotations

from typing import Any, Mapping

from spat_signals.common.constants import TIMING_SUFFIX
from spat_signals.common.models import TimingItem
from spat_signals.common.time_utils import round1, timing_raw_to_seconds
from spat_signals.pipeline.movements import decode_field_name


def extract_timing_items(record: Mapping[str, Any] | None, age_sec: float | None) -> list[TimingItem]:
    """Turn one timing record into countdown items, soonest first.

    ``age_sec`` is how long ago the record was transmitted; each countdown is
    reduced by it and floored at zero.
    """
    if not isinstance(record, Mapping):
        return []

    age = max(0.0, age_sec or 0.0)
    out: list[TimingItem] = []
    for key, value in record.items():
        if not isinstance(key, str) or not key.endswith(TIMING_SUFFIX):
            continue
        if value is None:
            continue

        sec_at_msg = timing_raw_to_seconds(value)
        if sec_at_msg is None:
            continue

        decoded = decode_field_name(key)
        sec_now = max(0.0, sec_at_msg - age)
        out.append(
            TimingItem(
                title=decoded.title,
                kind=decoded.mov_label,
                sec=round1(sec_now),
                sec_at_msg=round1(sec_at_msg),
                dir_code=decoded.dir_code,
                mov_code=decoded.mov_code,
                key=key,
            )
        )

    return sorted(out, key=lambda item: item.sec)
