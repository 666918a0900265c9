"""A fixed-size memory pool tracked by a bitmap header.

The pool's memory is split into a header and a data region. Every bit of the
header, most significant bit first, records whether the matching byte of the
data region is in use. Each allocated block is preceded by its size encoded
as a little-endian base-128 varint, stored back to front so that it can be
read backwards from the block's address when the block is freed.
"""

from __future__ import annotations

import mmap
import operator
from dataclasses import dataclass

PREFIX_MAX = 9
_SIZE_LIMIT = 1 << 64


class PoolClosedError(RuntimeError):
    """Raised when a pool is used after it has been closed."""


@dataclass(frozen=True)
class PoolProps:
    """Layout of a pool: total size, header size and usable data size."""

    size: int
    hsize: int
    dsize: int


def _clz8(value: int) -> int:
    return 8 - value.bit_length()


def _ctz8(value: int) -> int:
    if value == 0:
        return 8
    return (value & -value).bit_length() - 1


def encode_prefix(value: int) -> bytes:
    """Encode a block size as the varint prefix stored in front of the block.

    Seven bits go into each byte, low bits first, with the high bit marking
    that more bytes follow. The ninth byte, if reached, holds eight raw bits.
    """
    value = operator.index(value)
    if not 0 <= value < _SIZE_LIMIT:
        raise ValueError(f"block size out of range: {value}")
    out = bytearray()
    while True:
        if len(out) == PREFIX_MAX - 1:
            out.append(value & 0xFF)
            break
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            break
    return bytes(out)


class Pool:
    """A fixed-size pool handing out blocks addressed by offsets into its memory."""

    def __init__(self, size: int, page_size: int | None = None) -> None:
        size = operator.index(size)
        page_size = mmap.PAGESIZE if page_size is None else operator.index(page_size)
        if page_size <= 0:
            raise ValueError(f"page size must be positive, got {page_size}")
        if size <= 0:
            raise ValueError(f"pool size must be positive, got {size}")
        length = -(-size // page_size) * page_size
        hsize = length // 9
        self._props = PoolProps(size=length, hsize=hsize, dsize=hsize << 3)
        self._buf: bytearray | None = bytearray(length)

    @property
    def closed(self) -> bool:
        return self._buf is None

    @property
    def _memory(self) -> bytearray:
        if self._buf is None:
            raise PoolClosedError("pool is closed")
        return self._buf

    def props(self) -> PoolProps:
        """Return the layout of this pool."""
        self._memory
        return self._props

    def _locate_small(self, length: int) -> int | None:
        buf = self._memory
        hsize = self._props.hsize
        if hsize == 0:
            return None
        if _clz8(buf[0]) >= length:
            return 0
        for i in range(1, hsize):
            avail = _ctz8(buf[i - 1])
            offset = (i << 3) - avail
            avail += _clz8(buf[i])
            if avail >= length:
                return offset
        return None

    def _locate_large(self, length: int) -> int | None:
        buf = self._memory
        offset: int | None = None
        avail = 0
        for i, byte in enumerate(buf[: self._props.hsize]):
            if offset is not None:
                free_bits = _clz8(byte)
                avail += free_bits
                if avail >= length:
                    return offset
                if free_bits == 8:
                    continue
            free_bits = _ctz8(byte)
            if free_bits == 0:
                offset = None
                continue
            offset = i * 8 + (8 - free_bits)
            avail = free_bits
            if avail >= length:
                return offset
        return None

    @staticmethod
    def _apply(buf: bytearray, index: int, mask: int, value: bool) -> None:
        if not mask:
            return
        if value:
            buf[index] |= mask
        else:
            buf[index] &= ~mask & 0xFF

    def _mark(self, offset: int, length: int, value: bool) -> None:
        buf = self._memory
        end_bit = offset + length
        start_byte = offset >> 3
        end_byte = end_bit >> 3
        if start_byte == end_byte:
            mask = (0xFF >> (offset & 7)) & (0xFF << (7 - (end_bit & 7))) & 0xFF
            self._apply(buf, start_byte, mask, value)
            return
        self._apply(buf, start_byte, 0xFF >> (offset & 7), value)
        self._apply(buf, end_byte, (0xFF00 >> (end_bit & 7)) & 0xFF, value)
        span = end_byte - start_byte - 1
        if span > 0:
            buf[start_byte + 1 : end_byte] = (b"\xff" if value else b"\x00") * span

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes and return the address of the block's first byte.

        Raises MemoryError when no free run is large enough.
        """
        prefix = encode_prefix(size)
        total = size + len(prefix)
        if total < 8:
            offset = self._locate_small(total)
        else:
            offset = self._locate_large(total)
        if offset is None:
            raise MemoryError(f"pool has no room for a block of {size} bytes")
        self._mark(offset, total, True)
        start = self._props.hsize + offset
        buf = self._memory
        buf[start : start + len(prefix)] = prefix[::-1]
        return start + len(prefix)

    def free(self, address: int) -> None:
        """Release a block previously returned by :meth:`alloc`."""
        buf = self._memory
        hsize = self._props.hsize
        address = operator.index(address)
        if not hsize < address <= len(buf):
            raise ValueError(f"address {address} is outside the data region")
        loc = address
        region_size = 0
        prefix_size = 0
        shift = 0
        more = True
        while more:
            loc -= 1
            if loc < hsize:
                raise ValueError(f"address {address} does not start an allocated block")
            byte = buf[loc]
            if shift == 56:
                more = False
            else:
                more = bool(byte & 0x80)
                byte &= 0x7F
            region_size |= byte << shift
            shift += 7
            prefix_size += 1
        offset = loc - hsize
        total = region_size + prefix_size
        if offset + total > hsize * 8:
            raise ValueError(f"address {address} does not start an allocated block")
        self._mark(offset, total, False)

    def view(self, address: int, size: int) -> memoryview:
        """Return a writable view of ``size`` bytes of pool memory at ``address``."""
        buf = self._memory
        address = operator.index(address)
        size = operator.index(size)
        if address < 0 or size < 0 or address + size > len(buf):
            raise ValueError(f"range {address}+{size} is outside the pool")
        return memoryview(buf)[address : address + size]

    def close(self) -> None:
        """Release the pool's memory; later use raises PoolClosedError."""
        self._buf = None

    def __enter__(self) -> Pool:
        self._memory
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()