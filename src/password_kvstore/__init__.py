"""
password-kvstore: encrypted credential storage for a local password manager.

Entries are compressed, encrypted with a password-derived ChaCha20 stream
and wrapped in ChaCha20-Poly1305 sealed boxes inside a named Folder. A
Folder is persisted as a single deflate-compressed binary blob.
"""

from .crypto import ByteBuffer, CipherText, PasswordCipher, SealedBox
from .entry import Entry, Secret
from .errors import (
    AlreadyExists,
    DecodingError,
    DecryptionError,
    DeserializationError,
    EncodingError,
    EncryptionError,
    HexDecodeError,
    InvalidKeyError,
    InvalidUtf8,
    KVStoreError,
    NotFound,
    PasswordHashingError,
    StorageIOError,
)
from .folder import Folder, PlainFolder

__version__ = "0.1.0"

__all__ = [
    "ByteBuffer",
    "CipherText",
    "Entry",
    "Folder",
    "PasswordCipher",
    "PlainFolder",
    "SealedBox",
    "Secret",
    "AlreadyExists",
    "DecodingError",
    "DecryptionError",
    "DeserializationError",
    "EncodingError",
    "EncryptionError",
    "HexDecodeError",
    "InvalidKeyError",
    "InvalidUtf8",
    "KVStoreError",
    "NotFound",
    "PasswordHashingError",
    "StorageIOError",
]
