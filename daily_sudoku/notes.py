"""Pencil-mark bitmasks: bit ``d`` set means digit ``d`` is noted (bit 0 unused)."""

from __future__ import annotations

from typing import List

EMPTY = 0
FULL = 0b1111111110


def toggle(mask: int, digit: int) -> int:
    return mask ^ (1 << digit)


def clear(mask: int, digit: int) -> int:
    return mask & ~(1 << digit)


def has(mask: int, digit: int) -> bool:
    return bool(mask & (1 << digit))


def digits(mask: int) -> List[int]:
    return [digit for digit in range(1, 10) if mask & (1 << digit)]


__all__ = ["EMPTY", "FULL", "clear", "digits", "has", "toggle"]
