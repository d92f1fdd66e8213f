"""Pick the freshest upstream record for one intersection."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from spat_signals.common.time_utils import parse_transmission_time_ms


def records_for_intersection(records: Iterable[Any], itst_id: str) -> list[Mapping[str, Any]]:
    target = str(itst_id)
    out: list[Mapping[str, Any]] = []
    for record in records or []:
        if not isinstance(record, Mapping):
            continue
        if str(record.get("itstId", "")) == target:
            out.append(record)
    return out


def pick_latest(records: Iterable[Any], itst_id: str) -> Mapping[str, Any] | None:
    """Return the matching record with the greatest transmission time.

    Records without a timestamp score ``0`` and so only win when no matching
    record has one. Equal timestamps keep the first record seen.
    """
    latest: Mapping[str, Any] | None = None
    latest_ms = -1.0
    for record in records_for_intersection(records, itst_id):
        trsm_ms = parse_transmission_time_ms(record)
        if trsm_ms > latest_ms:
            latest = record
            latest_ms = trsm_ms
    return latest
