"""Password-derived ChaCha20 stream encryption."""

import secrets
import struct
from dataclasses import dataclass
from typing import NamedTuple, Optional

import structlog
from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .. import codec
from ..config import HashParameters
from ..errors import InvalidKeyError, PasswordHashingError
from .buffer import ByteBuffer, BytesLike
from .sealed_box import KEY_SIZE, NONCE_SIZE, SealedBox

logger = structlog.get_logger(__name__)

CHACHA20_BLOCK_SIZE = 64
MAX_BLOCK_COUNTER = 2**32 - 1


class PasswordHash(NamedTuple):
    """Output of the memory-hard password hash."""

    digest: ByteBuffer
    salt: ByteBuffer

    def destroy(self) -> None:
        self.digest.destroy()
        self.salt.destroy()


def hash_password(secret: BytesLike, params: Optional[HashParameters] = None) -> PasswordHash:
    """Hash ``secret`` with Argon2id under a fresh random salt.

    Args:
        secret: Password bytes.
        params: Hash parameters. Defaults to the standard, expensive set.

    Returns:
        The digest and the salt used to produce it.

    Raises:
        PasswordHashingError: If the hash primitive fails, e.g. when the
            memory cost cannot be allocated.
    """
    params = params or HashParameters()
    salt = secrets.token_bytes(params.salt_length)
    try:
        digest = hash_secret_raw(
            secret=bytes(secret),
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=params.hash_length,
            type=Type.ID,
        )
    except (HashingError, MemoryError) as e:
        raise PasswordHashingError(f"failed to hash password: {e}") from e
    return PasswordHash(digest=ByteBuffer(digest), salt=ByteBuffer(salt))


def _pbkdf2(secret: bytes, salt: bytes, iterations: int, length: int) -> ByteBuffer:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        iterations=iterations,
    )
    return ByteBuffer(kdf.derive(secret))


@dataclass
class CipherText:
    """Stream-cipher output and the nonce it was produced under.

    The nonce cannot be re-derived and must be stored with the ciphertext.
    """

    ciphertext: ByteBuffer
    nonce: bytes

    def __post_init__(self) -> None:
        if len(self.nonce) != NONCE_SIZE:
            raise InvalidKeyError(f"nonce must be {NONCE_SIZE} bytes, got {len(self.nonce)}")

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_value(self.ciphertext)
        encoder.write_fixed(self.nonce, NONCE_SIZE)

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "CipherText":
        ciphertext = decoder.read_value(ByteBuffer)
        return cls(ciphertext=ciphertext, nonce=decoder.read_fixed(NONCE_SIZE))


class KeyStream:
    """A ChaCha20 keystream positioned at a byte offset."""

    def __init__(self, key: bytes, nonce: bytes, offset: int = 0):
        if len(nonce) != NONCE_SIZE:
            raise InvalidKeyError(f"nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        block, skip = divmod(offset, CHACHA20_BLOCK_SIZE)
        if block > MAX_BLOCK_COUNTER:
            raise ValueError(f"keystream offset {offset} out of range")
        # 4-byte little-endian block counter followed by the 96-bit nonce
        full_nonce = struct.pack("<I", block) + bytes(nonce)
        self._encryptor = Cipher(algorithms.ChaCha20(bytes(key), full_nonce), mode=None).encryptor()
        self._encryptor.update(bytes(skip))
        self.position = offset

    def apply(self, data: BytesLike) -> ByteBuffer:
        """XOR the next ``len(data)`` keystream bytes into a new buffer."""
        raw = bytes(data)
        self.position += len(raw)
        return ByteBuffer(self._encryptor.update(raw))


class PasswordCipher:
    """Stream cipher keyed from a password.

    The password is sealed in a SealedBox at construction and only opened
    for the duration of a derivation. Keys and nonces are derived on
    every call and never cached.

    This provides confidentiality only: corrupted ciphertext decrypts to
    corrupted plaintext without error.
    """

    def __init__(
        self,
        password: str,
        iterations: int,
        hash_params: Optional[HashParameters] = None,
    ):
        if iterations < 1 or iterations > MAX_BLOCK_COUNTER:
            raise ValueError("iterations must be between 1 and 2**32 - 1")
        with ByteBuffer(password.encode("utf-8")) as raw:
            self._password = SealedBox.close(raw)
        self.iterations = iterations
        self.hash_params = hash_params or HashParameters()

    def _open_password(self) -> ByteBuffer:
        return self._password.open()

    def derive_hash(self) -> PasswordHash:
        """Run the memory-hard hash over the password. Never cached."""
        with self._open_password() as password:
            return hash_password(password, self.hash_params)

    def derive_key(self) -> ByteBuffer:
        """Derive the 256-bit stream key.

        The codec encoding of the password is hashed with SHA3-384 to get
        a salt, then (encoding, salt) is stretched with PBKDF2-HMAC-SHA256.
        Deterministic for a fixed password and iteration count.
        """
        with self._open_password() as password, ByteBuffer(codec.encode(password)) as encoded:
            digest = hashes.Hash(hashes.SHA3_384())
            digest.update(encoded.to_bytes())
            salt = digest.finalize()
            key = _pbkdf2(encoded.to_bytes(), salt, self.iterations, KEY_SIZE)
        logger.debug("derived_key", method="pbkdf2", iterations=self.iterations)
        return key

    def derive_nonce(self) -> bytes:
        """Derive a 96-bit nonce from a fresh password hash.

        The hash salt is random, so every call yields a different nonce.
        """
        password_hash = self.derive_hash()
        try:
            nonce = _pbkdf2(
                password_hash.digest.to_bytes(),
                password_hash.salt.to_bytes(),
                self.iterations,
                NONCE_SIZE,
            )
        finally:
            password_hash.destroy()
        with nonce:
            logger.debug("derived_nonce", salt_size=self.hash_params.salt_length)
            return nonce.to_bytes()

    def _stream_offset(self) -> int:
        with self._open_password() as password:
            return self.iterations + len(password)

    def build_stream(self, nonce: bytes) -> KeyStream:
        """Build the keystream at ``nonce``, past the first
        ``iterations + len(password)`` bytes."""
        with self.derive_key() as key:
            return KeyStream(key.to_bytes(), nonce, self._stream_offset())

    def apply_keystream(self, data: BytesLike, nonce: bytes) -> ByteBuffer:
        """XOR ``data`` with the keystream for ``nonce``."""
        return self.build_stream(nonce).apply(data)

    def encrypt(self, plaintext: BytesLike) -> CipherText:
        """Encrypt under a freshly derived nonce.

        Returns:
            The ciphertext and its nonce. The caller must persist both.
        """
        nonce = self.derive_nonce()
        ciphertext = self.apply_keystream(plaintext, nonce)
        logger.debug("encrypted_data", data_size=len(ciphertext))
        return CipherText(ciphertext=ciphertext, nonce=nonce)

    def decrypt(self, ciphertext: BytesLike, nonce: bytes) -> ByteBuffer:
        """Decrypt ``ciphertext`` produced under ``nonce``."""
        plaintext = self.apply_keystream(ciphertext, nonce)
        logger.debug("decrypted_data", data_size=len(plaintext))
        return plaintext

    def destroy(self) -> None:
        """Wipe the sealed password held in memory."""
        self._password.destroy()

    def __enter__(self) -> "PasswordCipher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return f"PasswordCipher(iterations={self.iterations})"
