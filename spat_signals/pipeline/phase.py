"""Per-movement signal status extraction."""

from __future__ import annotations

from typing import Any, Mapping

from spat_signals.common.constants import STATUS_SUFFIX
from spat_signals.common.models import PhaseItem
from spat_signals.pipeline.movements import decode_field_name


def _status_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def extract_phase_status(record: Mapping[str, Any] | None) -> list[PhaseItem]:
    if not isinstance(record, Mapping):
        return []

    out: list[PhaseItem] = []
    for key, value in record.items():
        if not isinstance(key, str) or not key.endswith(STATUS_SUFFIX):
            continue
        if value is None:
            continue

        decoded = decode_field_name(key)
        out.append(
            PhaseItem(
                title=decoded.title,
                kind=decoded.mov_label,
                status=_status_text(value),
                dir_code=decoded.dir_code,
                mov_code=decoded.mov_code,
                key=key,
            )
        )

    return sorted(out, key=lambda item: item.title)
