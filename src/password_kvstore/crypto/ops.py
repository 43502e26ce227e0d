"""Elementwise operations over byte sequences.

Binary operations pair their operands position by position and stop at
the shorter one; the tail of the longer operand is ignored. Results wrap
modulo 256.
"""

import operator
from typing import Callable, List, MutableSequence, Sequence

from .buffer import ByteBuffer

ByteOp = Callable[[int, int], int]


def zip_with(a: Sequence[int], b: Sequence[int], op: ByteOp) -> ByteBuffer:
    """Combine two byte sequences pairwise with ``op``."""
    return ByteBuffer((op(x, y) & 0xFF) for x, y in zip(a, b))


def add(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.add)


def sub(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.sub)


def mul(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.mul)


def div(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    """Pairwise integer division. A zero divisor raises ZeroDivisionError."""
    return zip_with(a, b, operator.floordiv)


def mod(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.mod)


def shl(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.lshift)


def shr(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.rshift)


def xor(a: Sequence[int], b: Sequence[int]) -> ByteBuffer:
    return zip_with(a, b, operator.xor)


def xor_ip(a: MutableSequence[int], b: Sequence[int]) -> None:
    """XOR ``b`` into ``a`` in place, up to the shorter length."""
    for i in range(min(len(a), len(b))):
        a[i] ^= b[i]


def invert(a: Sequence[int]) -> ByteBuffer:
    """One's complement of every byte."""
    return ByteBuffer((~x) & 0xFF for x in a)


def padding_length(items: Sequence[int], chunk_size: int) -> int:
    """Number of padding bytes ``chunk_padded`` appends."""
    length = len(items)
    if length > chunk_size:
        return length % chunk_size
    if 0 < length < chunk_size:
        return chunk_size % length
    return 0


def chunk_padded(items: Sequence[int], chunk_size: int, padding: int) -> List[ByteBuffer]:
    """Pad ``items`` with ``padding`` bytes and split into chunks."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    data = ByteBuffer(items)
    data.extend([padding] * padding_length(items, chunk_size))
    return [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]
