"""Cryptographic building blocks: secure buffers, sealing and stream encryption."""

from . import ops
from .buffer import ByteBuffer, ByteBufferSeq
from .encryption import CipherText, KeyStream, PasswordCipher, PasswordHash, hash_password
from .memory import complement, destroy, discharge, scrub, secure_buffer, zero
from .sealed_box import SealedBox

__all__ = [
    # Buffers
    "ByteBuffer",
    "ByteBufferSeq",
    "ops",
    # Secure erasure
    "scrub",
    "zero",
    "complement",
    "discharge",
    "destroy",
    "secure_buffer",
    # Encryption
    "SealedBox",
    "PasswordCipher",
    "CipherText",
    "KeyStream",
    "PasswordHash",
    "hash_password",
]
