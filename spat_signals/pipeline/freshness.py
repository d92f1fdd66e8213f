"""Message age, staleness and confidence for a reconciled snapshot."""

from __future__ import annotations

from typing import Any, Mapping

from spat_signals.common.constants import CONFIDENCE_BANDS, STALE_THRESHOLD_SEC
from spat_signals.common.time_utils import parse_transmission_time_ms


def reference_transmission_ms(
    latest_timing: Mapping[str, Any] | None,
    latest_phase: Mapping[str, Any] | None,
) -> float:
    """The fresher of the two feeds is time zero for latency correction."""
    return max(parse_transmission_time_ms(latest_timing), parse_transmission_time_ms(latest_phase))


def compute_age_sec(trsm_ms: float, now_ms: float) -> float | None:
    if not trsm_ms:
        return None
    return round(max(0.0, (now_ms - trsm_ms) / 1000), 3)


def is_stale(age_sec: float | None) -> bool:
    if age_sec is None:
        return True
    return age_sec > STALE_THRESHOLD_SEC


def confidence_level(age_sec: float | None) -> str:
    if age_sec is None:
        return "stale"
    for upper_bound, level in CONFIDENCE_BANDS:
        if age_sec <= upper_bound:
            return level
    return "stale"
