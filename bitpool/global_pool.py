"""A per-thread default pool used through module-level functions."""

from __future__ import annotations

import threading

from .pool import Pool, PoolClosedError, PoolProps

_state = threading.local()


def _current() -> Pool | None:
    return getattr(_state, "pool", None)


def _require() -> Pool:
    pool = _current()
    if pool is None:
        raise PoolClosedError("global pool is not initialised")
    return pool


def init(size: int) -> None:
    """Create this thread's pool holding at least ``size`` bytes, replacing any old one."""
    old = _current()
    if old is not None:
        old.close()
    _state.pool = None
    _state.pool = Pool(size)


def get_props() -> PoolProps | None:
    """Return the layout of this thread's pool, or None if it has none."""
    pool = _current()
    return None if pool is None else pool.props()


def alloc(size: int) -> int:
    """Allocate ``size`` bytes from this thread's pool."""
    return _require().alloc(size)


def free(address: int) -> None:
    """Free a block of this thread's pool; does nothing if there is no pool."""
    pool = _current()
    if pool is None:
        return
    pool.free(address)


def view(address: int, size: int) -> memoryview:
    """Return a writable view into this thread's pool."""
    return _require().view(address, size)