"""Data models shared by the reconciliation pipeline and its callers.

Field names are snake_case in Python; ``to_dict`` emits the camelCase names the
dashboard consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TimingItem:
    title: str
    kind: str
    sec: float
    sec_at_msg: float
    dir_code: str
    mov_code: str
    key: str


@dataclass(frozen=True)
class PhaseItem:
    title: str
    kind: str
    status: str
    dir_code: str
    mov_code: str
    key: str


@dataclass(frozen=True)
class MergedItem:
    title: str
    kind: str
    sec: float | None
    sec_at_msg: float | None
    status: str | None
    dir_code: str
    mov_code: str
    key: str | None
    phase_key: str | None

    @property
    def has_sec(self) -> bool:
        return self.sec is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "kind": self.kind,
            "sec": self.sec,
            "secAtMsg": self.sec_at_msg,
            "status": self.status,
            "dirCode": self.dir_code,
            "movCode": self.mov_code,
            "key": self.key,
            "phaseKey": self.phase_key,
        }


@dataclass(frozen=True)
class IntersectionMeta:
    itst_id: str
    name: str | None
    lat: float | None
    lon: float | None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> dict[str, Any]:
        return {"itstId": self.itst_id, "itstNm": self.name, "lat": self.lat, "lon": self.lon}


@dataclass(frozen=True)
class NearbyIntersection:
    itst_id: str
    name: str
    lat: float
    lon: float
    distance_m: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "itstId": self.itst_id,
            "itstNm": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "distanceM": self.distance_m,
        }


@dataclass(frozen=True)
class SignalSnapshot:
    itst_id: str
    name: str | None
    lat: float | None
    lon: float | None
    trsm_kst: str | None
    age_sec: float | None
    is_stale: bool
    confidence: str
    items: list[MergedItem]
    fetched_at_kst: str | None = None
    upstream: dict[str, Any] = field(default_factory=dict)
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "itstId": self.itst_id,
            "itstNm": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "trsmKst": self.trsm_kst,
            "ageSec": self.age_sec,
            "isStale": self.is_stale,
            "confidence": self.confidence,
            "items": [item.to_dict() for item in self.items],
        }
        if self.fetched_at_kst is not None:
            payload["fetchedAtKst"] = self.fetched_at_kst
        if self.upstream:
            payload["upstream"] = self.upstream
        if self.note is not None:
            payload["note"] = self.note
        return payload
