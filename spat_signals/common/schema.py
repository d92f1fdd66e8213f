"""Minimal strict schema for the service YAML config."""

from __future__ import annotations

from spat_signals.common.errors import ConfigError


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_spat_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"upstream", "metadata", "nearby"}
    _assert_required_keys(cfg, top_required, "spat config")
    _assert_no_unknown_keys(cfg, top_required, "spat config", allow_unknown)

    upstream_keys = {
        "timing_endpoint",
        "phase_endpoint",
        "api_key_env",
        "timeout_seconds",
        "page_size",
        "rate_limit_per_sec",
        "retry",
    }
    upstream = cfg["upstream"]
    _assert_required_keys(upstream, upstream_keys, "upstream")
    _assert_no_unknown_keys(upstream, upstream_keys, "upstream", allow_unknown)
    if not isinstance(upstream["api_key_env"], list) or not upstream["api_key_env"]:
        raise ConfigError("upstream.api_key_env must be a non-empty list")
    _assert_positive(upstream["timeout_seconds"], "upstream.timeout_seconds")
    _assert_positive(upstream["page_size"], "upstream.page_size")
    _assert_positive(upstream["rate_limit_per_sec"], "upstream.rate_limit_per_sec")
    _assert_required_keys(upstream["retry"], {"max_attempts", "multiplier", "max_wait"}, "upstream.retry")

    _assert_required_keys(cfg["metadata"], {"data_dir", "candidates"}, "metadata")
    if not isinstance(cfg["metadata"]["candidates"], list) or not cfg["metadata"]["candidates"]:
        raise ConfigError("metadata.candidates must be a non-empty list")

    _assert_required_keys(cfg["nearby"], {"default_k", "max_k"}, "nearby")
    if int(cfg["nearby"]["default_k"]) > int(cfg["nearby"]["max_k"]):
        raise ConfigError("nearby.default_k must not exceed nearby.max_k")

    return cfg
