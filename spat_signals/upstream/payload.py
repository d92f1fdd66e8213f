"""Locate the record array inside vendor response envelopes."""

from __future__ import annotations

from collections import deque
from typing import Any

COMMON_ARRAY_KEYS = ("data", "list", "items", "item", "result", "results", "body", "response")
RATE_LIMIT_FAILURE_CODE = 10005


def find_first_array_payload(root: Any) -> list | None:
    if isinstance(root, list):
        return root
    if not isinstance(root, dict):
        return None

    for key in COMMON_ARRAY_KEYS:
        value = root.get(key)
        if isinstance(value, list):
            return value

    queue: deque[Any] = deque([root])
    seen: set[int] = set()
    while queue:
        current = queue.popleft()
        if not isinstance(current, dict) or id(current) in seen:
            continue
        seen.add(id(current))
        for value in current.values():
            if isinstance(value, list):
                return value
            if isinstance(value, dict):
                queue.append(value)
    return None


def is_rate_limited_payload(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    if str(payload.get("responseCode", "")) == "429":
        return True
    if str(payload.get("failureCode", "")) == str(RATE_LIMIT_FAILURE_CODE):
        return True
    message = str(payload.get("message", "")).lower()
    return "rate limit" in message
