"""Client for the V2X timing and phase feeds.

Both feeds are fetched in parallel for one intersection. When the vendor
answers with its rate-limit envelope the pair is retried with the next
configured API key.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from spat_signals.common.config_loader import ApiKey, ConfigBundle, resolve_api_keys
from spat_signals.common.errors import ConfigError, UpstreamError, UpstreamShapeError
from spat_signals.common.http import HttpClient, JsonResponse, RetryConfig, TimeoutConfig
from spat_signals.common.logging import get_logger, log_event
from spat_signals.upstream.payload import find_first_array_payload, is_rate_limited_payload

MIN_TIMEOUT_SECONDS = 2.0
MASKED_QUERY_PARAMS = ("apikey", "apiKey", "token", "key")


@dataclass(frozen=True)
class FeedResult:
    feed: str
    status: int
    records: list


@dataclass(frozen=True)
class FeedPair:
    timing: FeedResult
    phase: FeedResult
    key_source: str


class RateLimitedError(UpstreamError):
    error_code = "UPSTREAM_RATE_LIMITED"


def build_upstream_url(
    base: str,
    *,
    api_key: str,
    itst_id: str | None = None,
    response_type: str = "json",
    page_no: int = 1,
    num_of_rows: int = 10,
) -> str:
    parsed = urlparse(base)
    query = dict(parse_qsl(parsed.query))
    query["type"] = response_type
    query["pageNo"] = str(page_no)
    query["numOfRows"] = str(num_of_rows)
    if itst_id:
        query["itstId"] = itst_id
    query["apikey"] = api_key
    return urlunparse(parsed._replace(query=urlencode(query)))


def mask_sensitive_url(raw_url: str) -> str:
    parsed = urlparse(raw_url)
    if not parsed.query:
        return raw_url
    pairs = [
        (name, "***" if name in MASKED_QUERY_PARAMS else value)
        for name, value in parse_qsl(parsed.query, keep_blank_values=True)
    ]
    return urlunparse(parsed._replace(query=urlencode(pairs, safe="*")))


def clamp_timeout(timeout_seconds: float | None, default: float) -> float:
    if timeout_seconds is None:
        return float(default)
    return max(MIN_TIMEOUT_SECONDS, float(timeout_seconds))


class SpatFeedClient:
    def __init__(
        self,
        upstream_config: Mapping[str, Any],
        http_client: HttpClient,
        api_keys: list[ApiKey],
        logger: logging.Logger | None = None,
    ) -> None:
        if not api_keys:
            env_names = ", ".join(upstream_config.get("api_key_env", []))
            raise ConfigError(f"No upstream API key configured (set one of: {env_names})")
        self.config = upstream_config
        self.http_client = http_client
        self.api_keys = api_keys
        self.logger = logger or get_logger()

    @classmethod
    def from_config(
        cls,
        bundle: ConfigBundle,
        *,
        environ: Mapping[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> "SpatFeedClient":
        upstream = bundle.upstream
        retry_cfg = upstream["retry"]
        http_client = HttpClient(
            timeout=TimeoutConfig(read=float(upstream["timeout_seconds"])),
            retry=RetryConfig(
                max_attempts=int(retry_cfg["max_attempts"]),
                multiplier=float(retry_cfg["multiplier"]),
                max_wait=float(retry_cfg["max_wait"]),
            ),
            rate_limit_per_sec=float(upstream["rate_limit_per_sec"]),
        )
        api_keys = resolve_api_keys(list(upstream["api_key_env"]), environ)
        return cls(upstream, http_client, api_keys, logger=logger)

    def close(self) -> None:
        self.http_client.close()

    def _fetch_one(self, feed: str, itst_id: str, api_key: ApiKey, timeout: TimeoutConfig) -> JsonResponse:
        url = build_upstream_url(
            self.config[f"{feed}_endpoint"],
            api_key=api_key.value,
            itst_id=itst_id,
            num_of_rows=int(self.config["page_size"]),
        )
        started = time.monotonic()
        self.logger.debug("fetch %s", mask_sensitive_url(url))
        response = self.http_client.get_json(url, timeout=timeout)
        log_event(
            self.logger,
            f"{feed} feed fetched",
            level=logging.DEBUG,
            itst_id=itst_id,
            feed=feed,
            event="FEED_FETCHED",
            status=response.status,
            duration_ms=int((time.monotonic() - started) * 1000),
            key_source=api_key.source,
        )
        return response

    def _fetch_pair(self, itst_id: str, api_key: ApiKey, timeout: TimeoutConfig) -> tuple[JsonResponse, JsonResponse]:
        with ThreadPoolExecutor(max_workers=2) as pool:
            timing = pool.submit(self._fetch_one, "timing", itst_id, api_key, timeout)
            phase = pool.submit(self._fetch_one, "phase", itst_id, api_key, timeout)
            return timing.result(), phase.result()

    def _to_result(self, feed: str, response: JsonResponse) -> FeedResult:
        records = find_first_array_payload(response.payload)
        if records is None:
            raise UpstreamShapeError(f"Unexpected {feed} upstream shape (array not found)")
        return FeedResult(feed=feed, status=response.status, records=records)

    def fetch_feeds(self, itst_id: str, *, timeout_seconds: float | None = None) -> FeedPair:
        seconds = clamp_timeout(timeout_seconds, self.config["timeout_seconds"])
        timeout = TimeoutConfig(connect=min(5.0, seconds), read=seconds)

        for attempt, api_key in enumerate(self.api_keys, start=1):
            timing, phase = self._fetch_pair(itst_id, api_key, timeout)
            if not (is_rate_limited_payload(timing.payload) or is_rate_limited_payload(phase.payload)):
                return FeedPair(
                    timing=self._to_result("timing", timing),
                    phase=self._to_result("phase", phase),
                    key_source=api_key.source,
                )
            log_event(
                self.logger,
                f"upstream rate limited with {api_key.source} key",
                level=logging.WARNING,
                itst_id=itst_id,
                event="RATE_LIMITED",
                status="retry" if attempt < len(self.api_keys) else "error",
                attempt=attempt,
                key_source=api_key.source,
                error_code=RateLimitedError.error_code,
            )

        raise RateLimitedError("Upstream rate limit exceeded for every configured API key")
