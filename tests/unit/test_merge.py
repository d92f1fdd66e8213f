from __future__ import annotations

from spat_signals.common.models import PhaseItem, TimingItem
from spat_signals.pipeline.merge import merge_items
from spat_signals.pipeline.movements import join_key
from spat_signals.pipeline.phase import extract_phase_status
from spat_signals.pipeline.timing import extract_timing_items


def _timing(dir_code: str, mov: str, sec: float, title: str, kind: str) -> TimingItem:
    return TimingItem(
        title=title,
        kind=kind,
        sec=sec,
        sec_at_msg=sec,
        dir_code=dir_code,
        mov_code=f"{mov}RmdrCs",
        key=f"{dir_code}{mov}RmdrCs",
    )


def _phase(dir_code: str, mov: str, status: str, title: str, kind: str) -> PhaseItem:
    return PhaseItem(
        title=title,
        kind=kind,
        status=status,
        dir_code=dir_code,
        mov_code=f"{mov}StatNm",
        key=f"{dir_code}{mov}StatNm",
    )


def test_merge_attaches_status_to_matching_timing_item():
    merged = merge_items(
        [_timing("nt", "Pdsg", 10.5, "북측 보행", "보행")],
        [_phase("nt", "Pdsg", "protected-Movement-Allowed", "북측 보행", "보행")],
    )

    assert len(merged) == 1
    assert merged[0].sec == 10.5
    assert merged[0].status == "protected-Movement-Allowed"
    assert merged[0].key == "ntPdsgRmdrCs"
    assert merged[0].phase_key == "ntPdsgStatNm"


def test_merge_timing_only_item_has_null_status():
    merged = merge_items([_timing("nt", "Stsg", 5.0, "북측 직진", "직진")], [])

    assert len(merged) == 1
    assert merged[0].status is None
    assert merged[0].phase_key is None


def test_merge_phase_only_item_surfaces_without_countdown():
    merged = merge_items([], [_phase("wt", "Ltsg", "stop-And-Remain", "서측 좌회전", "좌회전")])

    assert len(merged) == 1
    assert merged[0].sec is None
    assert merged[0].sec_at_msg is None
    assert merged[0].key is None
    assert merged[0].phase_key == "wtLtsgStatNm"


def test_merge_puts_pedestrian_first_despite_larger_sec():
    merged = merge_items(
        [
            _timing("nt", "Stsg", 5.0, "북측 직진", "직진"),
            _timing("nt", "Pdsg", 15.0, "북측 보행", "보행"),
        ],
        [],
    )
    assert [item.kind for item in merged] == ["보행", "직진"]


def test_merge_orders_known_sec_before_unknown_then_by_title():
    merged = merge_items(
        [
            _timing("et", "Stsg", 9.0, "동측 직진", "직진"),
            _timing("st", "Stsg", 3.0, "남측 직진", "직진"),
        ],
        [
            _phase("wt", "Ltsg", "stop-And-Remain", "서측 좌회전", "좌회전"),
            _phase("nt", "Ltsg", "stop-And-Remain", "북측 좌회전", "좌회전"),
            _phase("nt", "Pdsg", "stop-And-Remain", "북측 보행", "보행"),
        ],
    )

    assert [item.title for item in merged] == [
        "북측 보행",
        "남측 직진",
        "동측 직진",
        "북측 좌회전",
        "서측 좌회전",
    ]


def test_merge_covers_every_movement_exactly_once():
    timing = extract_timing_items(
        {"ntPdsgRmdrCs": 120, "etStsgRmdrCs": 40, "stLtsgRmdrCs": 15, "zzQqsgRmdrCs": 5},
        1.5,
    )
    phase = extract_phase_status(
        {"ntPdsgStatNm": "a", "wtStsgStatNm": "b", "stLtsgStatNm": "c", "zzQqsgStatNm": "d"}
    )

    merged = merge_items(timing, phase)

    expected = {join_key(i.dir_code, i.mov_code) for i in timing} | {join_key(i.dir_code, i.mov_code) for i in phase}
    produced = [join_key(i.dir_code, i.mov_code) for i in merged]
    assert len(produced) == len(set(produced))
    assert set(produced) == expected
    assert all(item.sec is not None or item.status is not None for item in merged)


def test_merge_is_idempotent():
    timing_record = {"ntPdsgRmdrCs": 120, "etStsgRmdrCs": 40, "stPdsgRmdrCs": 120}
    phase_record = {"ntPdsgStatNm": "a", "wtStsgStatNm": "b"}

    first = merge_items(extract_timing_items(timing_record, 2), extract_phase_status(phase_record))
    second = merge_items(extract_timing_items(timing_record, 2), extract_phase_status(phase_record))

    assert first == second


def test_merge_ordering_invariant_holds_per_group():
    timing = extract_timing_items(
        {"ntPdsgRmdrCs": 300, "stPdsgRmdrCs": 20, "etStsgRmdrCs": 10, "wtLtsgRmdrCs": 90},
        0,
    )
    phase = extract_phase_status({"nePdsgStatNm": "a", "seUtsgStatNm": "b"})
    merged = merge_items(timing, phase)

    kinds = [item.kind == "보행" for item in merged]
    assert kinds == sorted(kinds, reverse=True)
    for is_ped in (True, False):
        group = [item for item in merged if (item.kind == "보행") == is_ped]
        has_sec = [item.sec is not None for item in group]
        assert has_sec == sorted(has_sec, reverse=True)
        secs = [item.sec for item in group if item.sec is not None]
        assert secs == sorted(secs)
