"""Decode direction-prefixed movement field names.

Upstream fields look like ``ntPdsgRmdrCs``: a two-letter direction, a movement
token, and a feed suffix (``RmdrCs`` remaining time, ``StatNm`` status). Both
feeds share the direction and movement token, which is the join identity.
"""

from __future__ import annotations

from dataclasses import dataclass

from spat_signals.common.constants import (
    DIRECTION_LABELS,
    MOVEMENT_LABELS,
    PEDESTRIAN_LABEL,
    STATUS_SUFFIX,
    TIMING_SUFFIX,
)

FEED_SUFFIXES = (TIMING_SUFFIX, STATUS_SUFFIX)


@dataclass(frozen=True)
class DecodedField:
    dir_code: str
    mov_code: str
    dir_label: str
    mov_label: str

    @property
    def title(self) -> str:
        return f"{self.dir_label} {self.mov_label}"


def base_movement_code(mov_code: str) -> str:
    for suffix in FEED_SUFFIXES:
        if mov_code.endswith(suffix):
            return mov_code[: -len(suffix)]
    return mov_code


def movement_label(mov_code: str) -> str:
    base = base_movement_code(mov_code)
    if base in MOVEMENT_LABELS:
        return MOVEMENT_LABELS[base]
    return mov_code


def decode_field_name(key: str) -> DecodedField:
    dir_code = key[:2]
    mov_code = key[2:]
    return DecodedField(
        dir_code=dir_code,
        mov_code=mov_code,
        dir_label=DIRECTION_LABELS.get(dir_code, dir_code),
        mov_label=movement_label(mov_code),
    )


def join_key(dir_code: str, mov_code: str) -> tuple[str, str]:
    return dir_code, base_movement_code(mov_code)


def is_pedestrian(kind: str) -> bool:
    return kind == PEDESTRIAN_LABEL
