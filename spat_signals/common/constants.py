"""Application constants."""

USER_AGENT = "spat-signals/1.0 (+dashboard)"

KST_OFFSET_MS = 9 * 60 * 60 * 1000

TIMING_SUFFIX = "RmdrCs"
STATUS_SUFFIX = "StatNm"

DIRECTION_LABELS = {
    "nt": "북측",
    "et": "동측",
    "st": "남측",
    "wt": "서측",
    "ne": "북동측",
    "se": "남동측",
    "sw": "남서측",
    "nw": "북서측",
}

MOVEMENT_LABELS = {
    "Pdsg": "보행",
    "Stsg": "직진",
    "Ltsg": "좌회전",
    "Utsg": "유턴",
    "Bssg": "버스",
    "Bcsg": "자전거",
}

PEDESTRIAN_LABEL = MOVEMENT_LABELS["Pdsg"]

STALE_THRESHOLD_SEC = 3.0
CONFIDENCE_BANDS = (
    (2.0, "high"),
    (5.0, "medium"),
    (10.0, "low"),
)

RESPONSE_NOTE = (
    "잔여시간(*RmdrCs)은 '현재 켜진 신호' 기준입니다. "
    "'다음 보행 시작까지 남은 시간'은 직접 제공되지 않으며, 관측 기반 추정이 필요합니다."
)

JSON_LOG_FIELDS = (
    "timestamp",
    "itst_id",
    "feed",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "records_in",
    "items_out",
    "age_sec",
    "key_source",
    "error_code",
    "message",
)
