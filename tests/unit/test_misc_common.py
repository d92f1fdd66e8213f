import json
import logging

import pytest

from spat_signals.common.geometry import haversine_meters
from spat_signals.common.logging import JsonLineFormatter, build_logger, log_event
from spat_signals.common.models import MergedItem


def test_haversine_same_point_is_zero():
    assert haversine_meters(37.5665, 126.9780, 37.5665, 126.9780) == 0


def test_haversine_known_distance_and_symmetry():
    forward = haversine_meters(37.5665, 126.978, 37.5759, 126.9768)
    backward = haversine_meters(37.5759, 126.9768, 37.5665, 126.978)
    assert 1000 < forward < 1200
    assert forward == pytest.approx(backward)


def test_json_line_formatter_emits_stable_fields():
    record = logging.LogRecord("spat_signals", logging.INFO, __file__, 1, "hello", None, None)
    record.itst_id = "1000"
    record.event = "SNAPSHOT_BUILT"

    payload = json.loads(JsonLineFormatter().format(record))

    assert payload["itst_id"] == "1000"
    assert payload["event"] == "SNAPSHOT_BUILT"
    assert payload["message"] == "hello"
    assert payload["feed"] is None
    assert "timestamp" in payload


def test_build_logger_writes_json_lines_to_file(tmp_path):
    log_path = tmp_path / "logs" / "spat.log.jsonl"
    logger = build_logger("spat_signals.test_file", level="DEBUG", log_path=log_path)

    log_event(logger, "fetched", feed="timing", event="FEED_FETCHED", status=200)
    for handler in logger.handlers:
        handler.flush()

    line = log_path.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert json.loads(line)["feed"] == "timing"


def test_merged_item_to_dict_uses_wire_names():
    item = MergedItem(
        title="북측 보행",
        kind="보행",
        sec=7.0,
        sec_at_msg=12.0,
        status=None,
        dir_code="nt",
        mov_code="PdsgRmdrCs",
        key="ntPdsgRmdrCs",
        phase_key=None,
    )
    assert item.to_dict() == {
        "title": "북측 보행",
        "kind": "보행",
        "sec": 7.0,
        "secAtMsg": 12.0,
        "status": None,
        "dirCode": "nt",
        "movCode": "PdsgRmdrCs",
        "key": "ntPdsgRmdrCs",
        "phaseKey": None,
    }
