"""Join timing and phase items on movement identity and order for display."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from spat_signals.common.models import MergedItem, PhaseItem, TimingItem
from spat_signals.pipeline.movements import is_pedestrian, join_key


def _from_timing(item: TimingItem) -> MergedItem:
    return MergedItem(
        title=item.title,
        kind=item.kind,
        sec=item.sec,
        sec_at_msg=item.sec_at_msg,
        status=None,
        dir_code=item.dir_code,
        mov_code=item.mov_code,
        key=item.key,
        phase_key=None,
    )


def _from_phase(item: PhaseItem) -> MergedItem:
    return MergedItem(
        title=item.title,
        kind=item.kind,
        sec=None,
        sec_at_msg=None,
        status=item.status,
        dir_code=item.dir_code,
        mov_code=item.mov_code,
        key=None,
        phase_key=item.key,
    )


def display_sort_key(item: MergedItem) -> tuple:
    # Pedestrians lead, then known countdowns (soonest first), then by title.
    return (
        0 if is_pedestrian(item.kind) else 1,
        0 if item.has_sec else 1,
        item.sec if item.has_sec else 0.0,
        item.title,
    )


def merge_items(timing_items: Iterable[TimingItem], phase_items: Iterable[PhaseItem]) -> list[MergedItem]:
    by_movement: dict[tuple[str, str], MergedItem] = {}

    for timing in timing_items:
        by_movement[join_key(timing.dir_code, timing.mov_code)] = _from_timing(timing)

    for phase in phase_items:
        key = join_key(phase.dir_code, phase.mov_code)
        existing = by_movement.get(key)
        if existing is not None:
            by_movement[key] = replace(existing, status=phase.status, phase_key=phase.key)
        else:
            by_movement[key] = _from_phase(phase)

    return sorted(by_movement.values(), key=display_sort_key)
