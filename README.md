# bitpool

`bitpool` manages fixed-size memory pools. Each pool is one `bytearray`
whose length is the requested size rounded up to a whole number of pages.
The first ninth of the buffer is a bitmap header. After it comes the data
region, and each header bit, most significant bit first, marks one data
byte as used or free. Every allocation stores its size just before the
block as a variable-length prefix of up to 9 bytes, so `free` needs only
the block's address.

## Installation

```
pip install bitpool
```

## Size helpers

`bitpool.sizes` has the constants `KB`, `MB` and `GB` (1024, 1024², 1024³)
and three functions that convert a number of units into bytes, truncating
any fraction:

```python
from bitpool.sizes import kb, mb, gb

kb(4)     # 4096
mb(0.5)   # 524288
gb(1)     # 1073741824
```

Negative, infinite or NaN inputs raise `ValueError`.

## Explicit pools

```python
from bitpool.pool import Pool
from bitpool.sizes import kb

with Pool(kb(4), page_size=4096) as pool:
    props = pool.props()          # PoolProps(size=4096, hsize=455, dsize=3640)
    addr = pool.alloc(12)
    pool.view(addr, 12)[:] = b"hello, pool!"
    pool.free(addr)
```

- `Pool(size, page_size=None)` rounds `size` up to a multiple of
  `page_size`. When no page size is given, the system page size is used.
  A size or page size that is not positive raises `ValueError`.
- `props()` returns a frozen `PoolProps` with `size` (total bytes),
  `hsize` (header bytes) and `dsize` (bytes the header can track, eight
  for each header byte).
- `alloc(size)` returns the address of the new block. An address is an
  offset into the pool's buffer. When no free run is large enough, it
  raises `MemoryError`.
- `free(address)` releases a block. An address outside the data region,
  or one whose prefix does not describe a block that fits, raises
  `ValueError`.
- `view(address, size)` returns a writable `memoryview` of pool memory. A
  range that lies outside the pool raises `ValueError`.
- `close()` drops the pool's memory, and the `closed` property then reads
  `True`. After that, `props`, `alloc`, `free`, `view` and entering a
  `with` block raise `PoolClosedError`, which is a `RuntimeError`.
  Leaving a `with` block closes the pool.

`encode_prefix(value)` returns the size prefix for a block of `value`
bytes. Each byte holds seven bits, low bits first, and its high bit marks
that more bytes follow. A ninth byte, if one is needed, holds eight raw
bits. The prefix is written in front of the block in reverse order. Values
outside `0 <= value < 2**64` raise `ValueError`.

## The global pool

`bitpool.global_pool` gives each thread its own default pool:

```python
from bitpool import global_pool
from bitpool.sizes import kb

global_pool.init(kb(4))           # closes and replaces this thread's previous pool
addr = global_pool.alloc(8)
global_pool.view(addr, 8)[:] = bytes(8)
global_pool.free(addr)
global_pool.get_props()           # PoolProps of this thread's pool
```

Before `init` has been called in a thread, `get_props()` returns `None`,
`free` does nothing, and `alloc` and `view` raise `PoolClosedError`.

## Limits

Pools hold their memory in a Python `bytearray`, and addresses are offsets
into it, not machine pointers. A pool is not locked, so it must not be
shared between threads.