"""Fixed-layout binary codec and deflate compression.

Layout rules:
    - unsigned integers are 8-byte little-endian (u64)
    - byte strings and UTF-8 strings are prefixed with their u64 length
    - sequences and maps are prefixed with their u64 item count
    - maps are written in sorted key order
    - fixed-size arrays (keys, nonces) are written raw, without a prefix

Any type implementing the ``PlainBytes`` protocol can be encoded,
decoded, compressed and decompressed by the module-level functions.
"""

import struct
import zlib
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Protocol,
    Sequence,
    Type,
    TypeVar,
    runtime_checkable,
)

from .errors import DecodingError, DeserializationError, EncodingError

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

U64 = struct.Struct("<Q")
COMPRESSION_LEVEL = 9
DEFLATE_WBITS = -15  # raw deflate stream, no zlib header


@runtime_checkable
class PlainBytes(Protocol):
    """Serialization capability for codec-aware values."""

    def encode_fields(self, encoder: "Encoder") -> None:
        """Write every field, in declaration order, to the encoder."""
        ...

    @classmethod
    def decode_fields(cls, decoder: "Decoder") -> Any:
        """Read the fields written by ``encode_fields`` and build a value."""
        ...


class Encoder:
    """Accumulates the fixed-layout encoding of a value."""

    def __init__(self) -> None:
        self._out = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._out)

    def write_u64(self, value: int) -> None:
        try:
            self._out += U64.pack(value)
        except struct.error as e:
            raise EncodingError(f"cannot encode {value!r} as u64: {e}") from e

    def write_fixed(self, data: bytes, size: int) -> None:
        if len(data) != size:
            raise EncodingError(f"expected {size} bytes, got {len(data)}")
        self._out += data

    def write_bytes(self, data: bytes) -> None:
        self.write_u64(len(data))
        self._out += data

    def write_str(self, value: str) -> None:
        if not isinstance(value, str):
            raise EncodingError(f"expected str, got {type(value).__name__}")
        self.write_bytes(value.encode("utf-8"))

    def write_value(self, value: PlainBytes) -> None:
        if not isinstance(value, PlainBytes):
            raise EncodingError(f"{type(value).__name__} is not encodable")
        value.encode_fields(self)

    def write_seq(self, items: Sequence[T], write_item: Callable[[T], None]) -> None:
        self.write_u64(len(items))
        for item in items:
            write_item(item)

    def write_map(
        self,
        mapping: Mapping[K, V],
        write_key: Callable[[K], None],
        write_item: Callable[[V], None],
    ) -> None:
        self.write_u64(len(mapping))
        for key in sorted(mapping):
            write_key(key)
            write_item(mapping[key])


class Decoder:
    """Reads values back from their fixed-layout encoding."""

    def __init__(self, data: bytes) -> None:
        self._view = memoryview(bytes(data))
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise DeserializationError(
                f"unexpected end of input: need {size} bytes, {self.remaining} left"
            )
        chunk = self._view[self._pos:self._pos + size].tobytes()
        self._pos += size
        return chunk

    def read_u64(self) -> int:
        return U64.unpack(self._take(U64.size))[0]

    def read_fixed(self, size: int) -> bytes:
        return self._take(size)

    def read_bytes(self) -> bytes:
        return self._take(self.read_u64())

    def read_str(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DeserializationError(f"invalid utf-8 in string field: {e}") from e

    def read_value(self, cls: Type[T]) -> T:
        return cls.decode_fields(self)  # type: ignore[attr-defined]

    def read_seq(self, read_item: Callable[[], T]) -> List[T]:
        return [read_item() for _ in range(self.read_u64())]

    def read_map(
        self, read_key: Callable[[], K], read_item: Callable[[], V]
    ) -> Dict[K, V]:
        mapping: Dict[K, V] = {}
        for _ in range(self.read_u64()):
            key = read_key()
            mapping[key] = read_item()
        return mapping

    def finish(self) -> None:
        if self.remaining:
            raise DeserializationError(f"{self.remaining} trailing bytes after value")


def encode(value: PlainBytes) -> bytes:
    """Encode a value to its fixed-layout bytes."""
    encoder = Encoder()
    encoder.write_value(value)
    return encoder.getvalue()


def decode(cls: Type[T], data: bytes) -> T:
    """Decode a value of type ``cls`` from its fixed-layout bytes.

    Raises:
        DeserializationError: If the bytes are truncated, malformed or
            followed by trailing data.
    """
    decoder = Decoder(data)
    value = decoder.read_value(cls)
    decoder.finish()
    return value


def to_deflate_bytes(data: bytes) -> bytes:
    """Deflate raw bytes at maximum compression."""
    try:
        compressor = zlib.compressobj(COMPRESSION_LEVEL, zlib.DEFLATED, DEFLATE_WBITS)
        return compressor.compress(bytes(data)) + compressor.flush()
    except zlib.error as e:
        raise EncodingError(f"failed to deflate: {e}") from e


def from_deflate_bytes(data: bytes) -> bytes:
    """Inflate a raw deflate stream."""
    decompressor = zlib.decompressobj(DEFLATE_WBITS)
    try:
        raw = decompressor.decompress(bytes(data)) + decompressor.flush()
    except zlib.error as e:
        raise DecodingError(f"failed to inflate: {e}") from e
    if not decompressor.eof:
        raise DecodingError("truncated deflate stream")
    return raw


def compress(value: PlainBytes) -> bytes:
    """Encode then deflate a value."""
    return to_deflate_bytes(encode(value))


def decompress(cls: Type[T], data: bytes) -> T:
    """Inflate then decode a value of type ``cls``."""
    return decode(cls, from_deflate_bytes(data))
