"""Error taxonomy for the password key/value store."""

from typing import Dict


class KVStoreError(Exception):
    """Base exception for store operations.

    Every error carries a short ``variant`` name and a human readable
    ``message``. ``str(error)`` renders as ``"<variant>: <message>"``.
    """

    variant = "Error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.variant}: {self.message}"

    def to_dict(self) -> Dict[str, str]:
        """Serializable view of the error."""
        return {"variant": self.variant, "message": self.message}


class AlreadyExists(KVStoreError):
    """Raised when adding an entry whose name is already present."""

    variant = "AlreadyExists"


class NotFound(KVStoreError):
    """Raised when a named entry is absent."""

    variant = "NotFound"


class EncryptionError(KVStoreError):
    """Raised when sealing data fails."""

    variant = "EncryptionError"


class DecryptionError(KVStoreError):
    """Raised when a sealed box fails authentication."""

    variant = "DecryptionError"


class EncodingError(KVStoreError):
    """Raised when a value cannot be encoded or compressed."""

    variant = "EncodingError"


class DecodingError(KVStoreError):
    """Raised when compressed bytes cannot be inflated."""

    variant = "DecodingError"


class DeserializationError(KVStoreError):
    """Raised when encoded bytes do not describe a valid value."""

    variant = "DeserializationError"


class HexDecodeError(KVStoreError):
    """Raised on malformed hex text."""

    variant = "HexDecodeError"


class InvalidUtf8(KVStoreError):
    """Raised when secret bytes are not valid UTF-8 where text is required."""

    variant = "InvalidUtf8"


class InvalidKeyError(KVStoreError):
    """Raised when key or nonce material has the wrong size."""

    variant = "InvalidKeyError"


class PasswordHashingError(KVStoreError):
    """Raised when the memory-hard password hash fails."""

    variant = "PasswordHashingError"


class StorageIOError(KVStoreError):
    """Raised when an external transport fails to read or write a blob."""

    variant = "IOError"
