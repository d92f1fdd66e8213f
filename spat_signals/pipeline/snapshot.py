"""One reconciliation cycle: two raw feeds in, one display snapshot out."""

from __future__ import annotations

from typing import Any, Iterable

from spat_signals.common.models import IntersectionMeta, SignalSnapshot
from spat_signals.common.time_utils import to_kst_string
from spat_signals.pipeline.freshness import (
    compute_age_sec,
    confidence_level,
    is_stale,
    reference_transmission_ms,
)
from spat_signals.pipeline.merge import merge_items
from spat_signals.pipeline.phase import extract_phase_status
from spat_signals.pipeline.select import pick_latest
from spat_signals.pipeline.timing import extract_timing_items


def reconcile(
    timing_records: Iterable[Any],
    phase_records: Iterable[Any],
    itst_id: str,
    *,
    now_ms: float,
    meta: IntersectionMeta | None = None,
) -> SignalSnapshot:
    itst_id = str(itst_id)
    latest_timing = pick_latest(timing_records, itst_id)
    latest_phase = pick_latest(phase_records, itst_id)

    trsm_ms = reference_transmission_ms(latest_timing, latest_phase)
    age_sec = compute_age_sec(trsm_ms, now_ms)

    items = merge_items(
        extract_timing_items(latest_timing, age_sec or 0.0),
        extract_phase_status(latest_phase),
    )

    return SignalSnapshot(
        itst_id=itst_id,
        name=meta.name if meta else None,
        lat=meta.lat if meta else None,
        lon=meta.lon if meta else None,
        trsm_kst=to_kst_string(trsm_ms),
        age_sec=age_sec,
        is_stale=is_stale(age_sec),
        confidence=confidence_level(age_sec),
        items=items,
    )
