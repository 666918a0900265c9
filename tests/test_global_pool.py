import mmap
import threading
from collections import deque

import pytest

from bitpool import global_pool
from bitpool.pool import PoolClosedError, encode_prefix
from bitpool.sizes import kb

BLOCK_LIMIT = 32
BLOCK_SIZES = [8, 4, 12, 2, 14]


def in_fresh_thread(fn):
    outcome = {}

    def target():
        try:
            outcome["value"] = fn()
        except BaseException as error:  # re-raised in the calling thread
            outcome["error"] = error

    thread = threading.Thread(target=target)
    thread.start()
    thread.join()
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


def test_uninitialised_has_no_props():
    def body():
        return global_pool.get_props()

    assert in_fresh_thread(body) is None


def test_uninitialised_alloc_raises():
    with pytest.raises(PoolClosedError):
        in_fresh_thread(lambda: global_pool.alloc(8))


def test_uninitialised_view_raises():
    with pytest.raises(PoolClosedError):
        in_fresh_thread(lambda: global_pool.view(0, 1))


def test_uninitialised_free_is_ignored():
    def body():
        global_pool.free(1234)
        return global_pool.get_props()

    assert in_fresh_thread(body) is None


def test_init_reports_props():
    props = in_fresh_thread(lambda: (global_pool.init(kb(4)), global_pool.get_props())[1])
    assert props.size >= kb(4)
    assert props.size % mmap.PAGESIZE == 0
    assert props.hsize == props.size // 9
    assert props.dsize == props.hsize * 8


def test_reinit_starts_fresh():
    def body():
        global_pool.init(kb(4))
        first = global_pool.alloc(8)
        global_pool.alloc(4)
        global_pool.init(kb(4))
        return first, global_pool.alloc(8)

    first, again = in_fresh_thread(body)
    assert first == again


def test_pool_is_thread_local():
    def body():
        global_pool.init(kb(4))
        inner = in_fresh_thread(global_pool.get_props)
        return inner, global_pool.get_props()

    inner, outer = in_fresh_thread(body)
    assert inner is None
    assert outer.size >= kb(4)


def test_alloc_view_free():
    def body():
        global_pool.init(kb(4))
        hsize = global_pool.get_props().hsize
        address = global_pool.alloc(5)
        global_pool.view(address, 5)[:] = b"abcde"
        data = bytes(global_pool.view(address, 5))
        global_pool.free(address)
        return data, bytes(global_pool.view(0, hsize)), hsize

    data, header, hsize = in_fresh_thread(body)
    assert data == b"abcde"
    assert header == bytes(hsize)


def test_cycling_allocations():
    def body():
        global_pool.init(kb(4))
        live = deque()
        for head in range(256):
            size = BLOCK_SIZES[head % len(BLOCK_SIZES)]
            address = global_pool.alloc(size)
            global_pool.view(address, size)[:] = bytes([head]) * size
            if len(live) == BLOCK_LIMIT:
                global_pool.free(live.popleft()[0])
            live.append((address, size))
        address, size = live[-1]
        return (
            len(live),
            len({a for a, _ in live}),
            bytes(global_pool.view(address, size)),
            bytes(global_pool.view(address - 1, 1)),
            size,
        )

    count, unique, data, prefix, size = in_fresh_thread(body)
    assert count == BLOCK_LIMIT
    assert unique == BLOCK_LIMIT
    assert data == bytes([255]) * size
    assert prefix == encode_prefix(size)