"""Owned byte buffers with an explicit secure-destruction contract."""

import secrets
from functools import total_ordering
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Set,
    TypeVar,
    Union,
    overload,
)

from .. import codec
from ..errors import HexDecodeError
from .memory import destroy as _destroy

T = TypeVar("T")

BytesLike = Union[bytes, bytearray, memoryview, Iterable[int], "ByteBuffer"]


@total_ordering
class ByteBuffer:
    """A mutable, owned sequence of bytes.

    Equality compares content element by element and is not timing-safe.
    Ordering is lexicographic. Buffers holding secrets must be released
    with ``destroy()`` or by using the buffer as a context manager; the
    teardown overwrites the content and leaves it all-zero.
    """

    __slots__ = ("_bytes",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, data: BytesLike = b""):
        if isinstance(data, ByteBuffer):
            self._bytes = bytearray(data._bytes)
        else:
            self._bytes = bytearray(data)

    @classmethod
    def random(cls, length: int) -> "ByteBuffer":
        """Fill ``length`` bytes from a cryptographically secure source."""
        return cls(secrets.token_bytes(length))

    @classmethod
    def from_hex(cls, text: str, sep: str = "") -> "ByteBuffer":
        """Parse hex text produced by ``to_hex``.

        Args:
            text: Hex digits, optionally ``0x``-prefixed per byte.
            sep: Separator placed between bytes, if any.

        Raises:
            HexDecodeError: If the text is not valid hex.
        """
        if not text:
            return cls()
        if sep:
            parts = text.split(sep)
        else:
            # without a separator every byte may carry its own prefix
            parts = [text.replace("0X", "0x").replace("0x", "")]
        out = bytearray()
        for part in parts:
            part = part.strip()
            if part[:2] in ("0x", "0X"):
                part = part[2:]
            if sep and len(part) != 2:
                raise HexDecodeError(f"invalid hex byte {part!r}")
            try:
                out += bytes.fromhex(part)
            except ValueError as e:
                raise HexDecodeError(f"invalid hex text: {e}") from e
        return cls(out)

    @classmethod
    def from_compressed_bytes(cls, data: bytes) -> "ByteBuffer":
        return codec.decompress(cls, data)

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_bytes(bytes(self._bytes))

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "ByteBuffer":
        return cls(decoder.read_bytes())

    def to_compressed_bytes(self) -> bytes:
        return codec.compress(self)

    def to_hex(self, sep: str = "", hint: bool = False) -> str:
        """Render as hex, one two-digit group per byte.

        Args:
            sep: String placed between byte groups.
            hint: Prefix every byte with ``0x``.
        """
        prefix = "0x" if hint else ""
        return sep.join(f"{prefix}{byte:02x}" for byte in self._bytes)

    def to_bytes(self) -> bytes:
        return bytes(self._bytes)

    def to_list(self) -> List[int]:
        return list(self._bytes)

    def is_empty(self) -> bool:
        return not self._bytes

    def filter(self, predicate: Callable[[int], bool]) -> "ByteBuffer":
        return ByteBuffer(byte for byte in self._bytes if predicate(byte))

    def map(self, func: Callable[[int], int]) -> "ByteBuffer":
        return ByteBuffer(func(byte) for byte in self._bytes)

    def set(self) -> Set[int]:
        return set(self._bytes)

    def difference(self, other: "ByteBuffer") -> "ByteBuffer":
        """Unique byte values present here but not in ``other``, ascending."""
        return ByteBuffer(sorted(self.set() - set(other)))

    def intersection(self, other: "ByteBuffer") -> "ByteBuffer":
        """Unique byte values present in both buffers, ascending."""
        return ByteBuffer(sorted(self.set() & set(other)))

    def contains(self, byte: int) -> bool:
        return byte in self._bytes

    def sort_by(self, key: Optional[Callable[[int], Any]] = None, reverse: bool = False) -> None:
        self._bytes[:] = sorted(self._bytes, key=key, reverse=reverse)

    def get(self, index: int) -> Optional[int]:
        if 0 <= index < len(self._bytes):
            return self._bytes[index]
        return None

    def push(self, byte: int) -> None:
        self._bytes.append(byte)

    def pop(self) -> Optional[int]:
        if not self._bytes:
            return None
        return self._bytes.pop()

    def extend(self, items: Iterable[int]) -> None:
        self._bytes.extend(items)

    def extended(self, items: Iterable[int]) -> "ByteBuffer":
        data = self.copy()
        data.extend(items)
        return data

    def copy(self) -> "ByteBuffer":
        return ByteBuffer(self._bytes)

    def then(self, func: Callable[["ByteBuffer"], T]) -> Optional[T]:
        """Apply ``func`` to a copy of a non-empty buffer; None when empty."""
        if self._bytes:
            return func(self.copy())
        return None

    def destroy(self) -> None:
        """Securely erase the content. The buffer is left all-zero."""
        _destroy(self._bytes)

    def __enter__(self) -> "ByteBuffer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()

    def __len__(self) -> int:
        return len(self._bytes)

    def __iter__(self) -> Iterator[int]:
        return iter(self._bytes)

    def __contains__(self, byte: object) -> bool:
        return byte in self._bytes

    def __bytes__(self) -> bytes:
        return bytes(self._bytes)

    @overload
    def __getitem__(self, index: int) -> int: ...

    @overload
    def __getitem__(self, index: slice) -> "ByteBuffer": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ByteBuffer(self._bytes[index])
        return self._bytes[index]

    def __setitem__(self, index, value) -> None:
        self._bytes[index] = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteBuffer):
            other_bytes: Any = other._bytes
        elif isinstance(other, (bytes, bytearray, memoryview)):
            other_bytes = other
        else:
            return NotImplemented
        if len(self._bytes) != len(other_bytes):
            return False
        for mine, theirs in zip(self._bytes, other_bytes):
            if mine != theirs:
                return False
        return True

    def __lt__(self, other: object) -> bool:
        if isinstance(other, ByteBuffer):
            return self._bytes < other._bytes
        if isinstance(other, (bytes, bytearray)):
            return self._bytes < other
        return NotImplemented

    def __repr__(self) -> str:
        return f"data![{self.to_hex(', ', True)}]"

    def __str__(self) -> str:
        return self.to_hex()


class ByteBufferSeq:
    """An ordered sequence of ByteBuffers with a tracked length."""

    def __init__(self, items: Optional[Iterable[ByteBuffer]] = None):
        self._seq: List[ByteBuffer] = [ByteBuffer(item) for item in items or ()]
        self._length = len(self._seq)

    @classmethod
    def from_buffer(cls, data: ByteBuffer) -> "ByteBufferSeq":
        """Rebuild a sequence from the buffer produced by ``to_buffer``."""
        return codec.decode(cls, data.to_bytes())

    def to_buffer(self) -> ByteBuffer:
        return ByteBuffer(codec.encode(self))

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_seq(self._seq, encoder.write_value)
        encoder.write_u64(self._length)

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "ByteBufferSeq":
        seq = cls(decoder.read_seq(lambda: decoder.read_value(ByteBuffer)))
        seq._length = decoder.read_u64()
        return seq

    def get(self, index: int) -> Optional[ByteBuffer]:
        if 0 <= index < len(self._seq):
            return self._seq[index].copy()
        return None

    def push(self, item: ByteBuffer) -> None:
        self._length += 1
        self._seq.append(item)

    def pop(self) -> Optional[ByteBuffer]:
        if not self._seq:
            return None
        self._length -= 1
        return self._seq.pop()

    def extend(self, items: Iterable[ByteBuffer]) -> None:
        self._seq.extend(items)
        self._length = len(self._seq)

    def is_empty(self) -> bool:
        return not self._seq

    def destroy(self) -> None:
        for item in self._seq:
            item.destroy()

    def __len__(self) -> int:
        return len(self._seq)

    def __iter__(self) -> Iterator[ByteBuffer]:
        return iter(self._seq)

    def __getitem__(self, index: int) -> ByteBuffer:
        return self._seq[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteBufferSeq):
            return NotImplemented
        return self._seq == other._seq and self._length == other._length

    def __repr__(self) -> str:
        return f"ByteBufferSeq({self._seq!r})"
