"""Static intersection metadata and the nearby-intersection finder.

The store is built once at process start and handed to whatever needs it; the
reconciliation pipeline only ever sees a single ``IntersectionMeta``.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Iterable, Iterator

from spat_signals.common.errors import ValidationError
from spat_signals.common.fs import read_json, write_json
from spat_signals.common.geometry import haversine_meters
from spat_signals.common.logging import get_logger, log_event
from spat_signals.common.models import IntersectionMeta, NearbyIntersection

NEARBY_MIN_K = 1
NEARBY_MAX_K = 20
MISSING_NAME = "-"


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _first_present(row: dict, *names: str) -> Any:
    for name in names:
        if row.get(name) is not None:
            return row[name]
    return None


def row_to_meta(row: dict) -> IntersectionMeta:
    name = row.get("itstNm")
    return IntersectionMeta(
        itst_id=str(row["itstId"]),
        name=name if isinstance(name, str) else None,
        lat=_safe_float(_first_present(row, "mapCtptIntLat", "lat")),
        lon=_safe_float(_first_present(row, "mapCtptIntLot", "lon")),
    )


def _metadata_rows(rows: Any) -> Iterator[dict]:
    if not isinstance(rows, list):
        return
    for row in rows:
        if isinstance(row, dict) and "itstId" in row:
            yield row


class IntersectionMetadataStore:
    def __init__(self, entries: dict[str, IntersectionMeta] | None = None) -> None:
        self._entries = dict(entries or {})

    @classmethod
    def from_rows(cls, rows: Any) -> "IntersectionMetadataStore":
        entries: dict[str, IntersectionMeta] = {}
        for row in _metadata_rows(rows):
            meta = row_to_meta(row)
            entries[meta.itst_id] = meta
        return cls(entries)

    @classmethod
    def from_candidates(
        cls,
        paths: Iterable[Path],
        logger: logging.Logger | None = None,
    ) -> "IntersectionMetadataStore":
        """Load the first readable candidate; an unreadable set yields an empty store."""
        logger = logger or get_logger()
        last_error: Exception | None = None
        for path in paths:
            try:
                rows = read_json(path)
            except (OSError, ValueError) as exc:
                last_error = exc
                continue
            store = cls.from_rows(rows)
            log_event(
                logger,
                f"loaded intersection metadata from {path.name}",
                level=logging.DEBUG,
                event="METADATA_LOADED",
                status="ok",
                items_out=len(store),
            )
            return store

        log_event(
            logger,
            f"intersection metadata not loaded: {last_error or 'no candidate files'}",
            level=logging.WARNING,
            event="METADATA_LOADED",
            status="error",
            error_code="METADATA_UNAVAILABLE",
        )
        return cls()

    def get(self, itst_id: str) -> IntersectionMeta | None:
        return self._entries.get(str(itst_id))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IntersectionMeta]:
        return iter(self._entries.values())


def clamp_k(k: Any, *, default: int = 5, maximum: int = NEARBY_MAX_K) -> int:
    value = _safe_float(k)
    if value is None:
        value = default
    return int(max(NEARBY_MIN_K, min(maximum, value)))


def find_nearby(
    store: IntersectionMetadataStore,
    lat: Any,
    lon: Any,
    k: Any = None,
    *,
    default_k: int = 5,
    max_k: int = NEARBY_MAX_K,
) -> list[NearbyIntersection]:
    origin_lat = _safe_float(lat)
    origin_lon = _safe_float(lon)
    if origin_lat is None or origin_lon is None:
        raise ValidationError("invalid lat/lon")

    limit = clamp_k(k, default=default_k, maximum=max_k)
    candidates: list[NearbyIntersection] = []
    for meta in store:
        if not meta.has_coordinates:
            continue
        candidates.append(
            NearbyIntersection(
                itst_id=meta.itst_id,
                name=meta.name or MISSING_NAME,
                lat=meta.lat,
                lon=meta.lon,
                distance_m=haversine_meters(origin_lat, origin_lon, meta.lat, meta.lon),
            )
        )
    candidates.sort(key=lambda item: item.distance_m)
    return candidates[:limit]


def build_compact_metadata(source_path: Path, target_path: Path) -> int:
    """Reduce a raw intersection export to ``{itstId, itstNm, lat, lon}`` rows."""
    source = read_json(source_path)
    if not isinstance(source, list):
        raise ValidationError(f"{source_path} is not an array")
    compact = [row_to_meta(row).to_dict() for row in _metadata_rows(source)]
    write_json(target_path, compact, compact=True)
    return len(compact)
