"""Secure erasure of byte buffers holding sensitive data."""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterable, Iterator, MutableSequence, Union

if TYPE_CHECKING:
    from .buffer import ByteBuffer

Buffer = MutableSequence[int]

DISCHARGE_PASSES = 255


def scrub(buf: Buffer, byte: int) -> None:
    """Set every element of the buffer to ``byte``.

    Args:
        buf: A mutable byte sequence (bytearray or ByteBuffer).
        byte: Fill value, 0..255.
    """
    length = len(buf)
    buf[0:length] = bytes((byte,)) * length


def zero(buf: Buffer) -> None:
    """Zero every element of the buffer."""
    scrub(buf, 0)


def complement(buf: Buffer) -> None:
    """Flip every bit of the buffer in place. Applying it twice is a no-op."""
    for i in range(len(buf)):
        buf[i] ^= 0xFF


def discharge(buf: Buffer) -> None:
    """Rewrite the whole buffer 255 times with ``0xFF ^ k`` for k in 0..254."""
    for k in range(DISCHARGE_PASSES):
        scrub(buf, 0xFF ^ k)


def destroy(buf: Buffer) -> None:
    """Run the teardown sequence applied when a buffer's ownership ends.

    The final content is always all-zero.
    """
    complement(buf)
    scrub(buf, 0x07)
    scrub(buf, 0x00)
    scrub(buf, 0x01)
    zero(buf)
    discharge(buf)
    zero(buf)


@contextmanager
def secure_buffer(
    initial: Union[bytes, bytearray, Iterable[int]] = b"",
) -> Iterator["ByteBuffer"]:
    """Create a ByteBuffer that is destroyed on exit.

    Yields:
        A ByteBuffer that can be used to hold sensitive bytes.
    """
    from .buffer import ByteBuffer

    buf = ByteBuffer(initial)
    try:
        yield buf
    finally:
        buf.destroy()
