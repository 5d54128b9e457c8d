"""Unique runtime names for blocks and other scene items.

Generators are passed explicitly to the code that builds entries so no module
holds a hidden counter.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Protocol

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value < 0:
        return "-" + to_base36(-value)
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


class IdGenerator(Protocol):
    def __call__(self, prefix: str) -> str: ...


class SequenceIdGenerator:
    """Names like ``block_core_lq2x9d1s_00a``: prefix, base36 millis, base36 sequence.

    The sequence wraps at 16 bits, so uniqueness relies on the timestamp once
    more than 65536 names are drawn within one millisecond.
    """

    def __init__(self, clock: Callable[[], float] = time.time, start: int = 0):
        self._clock = clock
        self._seq = start

    def __call__(self, prefix: str) -> str:
        stamp = to_base36(int(self._clock() * 1000))
        seq = to_base36(self._seq & 0xFFFF).rjust(3, "0")
        self._seq += 1
        return f"{prefix}_{stamp}_{seq}"


class UuidIdGenerator:
    def __call__(self, prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4().hex}"
