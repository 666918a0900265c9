"""Size helpers expressed in binary kilo-, mega- and gigabytes."""

from __future__ import annotations

import math

KB = 1024
MB = 1024 * KB
GB = 1024 * MB


def _scale(n: float, unit: int) -> int:
    value = float(n) * float(unit)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"size must be a finite, non-negative number, got {n!r}")
    return int(value)


def kb(n: float) -> int:
    """Return ``n`` kilobytes as a whole number of bytes, truncating fractions."""
    return _scale(n, KB)


def mb(n: float) -> int:
    """Return ``n`` megabytes as a whole number of bytes, truncating fractions."""
    return _scale(n, MB)


def gb(n: float) -> int:
    """Return ``n`` gigabytes as a whole number of bytes, truncating fractions."""
    return _scale(n, GB)