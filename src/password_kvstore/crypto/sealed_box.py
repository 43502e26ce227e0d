"""Ephemeral AEAD envelope built on ChaCha20-Poly1305.

A SealedBox carries its own key and nonce next to the ciphertext. It
detects tampering, but anyone able to read the whole box can open it, so
it is only used nested under a layer that keeps its own key off the wire.
"""

import os
from dataclasses import dataclass

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .. import codec
from ..errors import DecryptionError, EncryptionError, InvalidKeyError
from .buffer import ByteBuffer, BytesLike

logger = structlog.get_logger(__name__)

KEY_SIZE = 32  # 256-bit key
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16


@dataclass(frozen=True)
class SealedBox:
    """Ciphertext+tag together with the key and nonce that opens it."""

    ciphertext: ByteBuffer
    key: bytes
    nonce: bytes

    def __post_init__(self) -> None:
        if len(self.key) != KEY_SIZE:
            raise InvalidKeyError(f"sealed box key must be {KEY_SIZE} bytes, got {len(self.key)}")
        if len(self.nonce) != NONCE_SIZE:
            raise InvalidKeyError(
                f"sealed box nonce must be {NONCE_SIZE} bytes, got {len(self.nonce)}"
            )

    @classmethod
    def close(cls, plaintext: BytesLike) -> "SealedBox":
        """Seal ``plaintext`` under a freshly generated key and nonce.

        Raises:
            EncryptionError: If sealing fails.
        """
        key = ChaCha20Poly1305.generate_key()
        nonce = os.urandom(NONCE_SIZE)
        try:
            ciphertext = ChaCha20Poly1305(key).encrypt(nonce, bytes(plaintext), None)
        except (TypeError, ValueError, OverflowError) as e:
            raise EncryptionError(f"failed to seal data: {e}") from e
        return cls(ciphertext=ByteBuffer(ciphertext), key=key, nonce=nonce)

    def open(self) -> ByteBuffer:
        """Authenticate and decrypt the box.

        Returns:
            The plaintext, as a ByteBuffer owned by the caller.

        Raises:
            DecryptionError: If the ciphertext or tag was altered.
        """
        try:
            plaintext = ChaCha20Poly1305(self.key).decrypt(
                self.nonce, self.ciphertext.to_bytes(), None
            )
        except InvalidTag as e:
            logger.debug("sealed_box_open_failed", size=len(self.ciphertext))
            raise DecryptionError("sealed box failed authentication") from e
        return ByteBuffer(plaintext)

    def destroy(self) -> None:
        """Wipe the in-memory ciphertext."""
        self.ciphertext.destroy()

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_value(self.ciphertext)
        encoder.write_fixed(self.key, KEY_SIZE)
        encoder.write_fixed(self.nonce, NONCE_SIZE)

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "SealedBox":
        ciphertext = decoder.read_value(ByteBuffer)
        key = decoder.read_fixed(KEY_SIZE)
        nonce = decoder.read_fixed(NONCE_SIZE)
        return cls(ciphertext=ciphertext, key=key, nonce=nonce)

    def __repr__(self) -> str:
        return f"SealedBox(ciphertext=<{len(self.ciphertext)} bytes>)"
