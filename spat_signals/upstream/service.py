"""Fetch both feeds for an intersection and reconcile them into a snapshot."""

from __future__ import annotations

import logging
from dataclasses import replace

from spat_signals.common.constants import RESPONSE_NOTE
from spat_signals.common.errors import ValidationError
from spat_signals.common.logging import get_logger, log_event
from spat_signals.common.models import SignalSnapshot
from spat_signals.common.time_utils import now_kst_string, utc_now_ms
from spat_signals.metadata.intersections import IntersectionMetadataStore
from spat_signals.pipeline.snapshot import reconcile
from spat_signals.upstream.tdata_client import SpatFeedClient


def fetch_signal_snapshot(
    itst_id: str,
    *,
    feed_client: SpatFeedClient,
    metadata: IntersectionMetadataStore,
    timeout_seconds: float | None = None,
    now_ms: float | None = None,
    logger: logging.Logger | None = None,
) -> SignalSnapshot:
    logger = logger or get_logger()
    itst_id = str(itst_id or "").strip()
    if not itst_id:
        raise ValidationError("missing itstId")

    feeds = feed_client.fetch_feeds(itst_id, timeout_seconds=timeout_seconds)

    # Age is measured after the fetch so request latency counts against the data.
    current_ms = utc_now_ms() if now_ms is None else now_ms
    snapshot = reconcile(
        feeds.timing.records,
        feeds.phase.records,
        itst_id,
        now_ms=current_ms,
        meta=metadata.get(itst_id),
    )
    snapshot = replace(
        snapshot,
        fetched_at_kst=now_kst_string(now_ms=current_ms),
        upstream={
            "timing": {"status": feeds.timing.status},
            "phase": {"status": feeds.phase.status},
            "keySource": feeds.key_source,
        },
        note=RESPONSE_NOTE,
    )

    log_event(
        logger,
        "signal snapshot built",
        itst_id=itst_id,
        event="SNAPSHOT_BUILT",
        status="stale" if snapshot.is_stale else "ok",
        records_in=len(feeds.timing.records) + len(feeds.phase.records),
        items_out=len(snapshot.items),
        age_sec=snapshot.age_sec,
        key_source=feeds.key_source,
    )
    return snapshot
