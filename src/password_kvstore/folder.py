"""Name-keyed credential stores."""

from typing import Dict, List, Optional

import structlog

from . import codec
from .crypto.encryption import CipherText, PasswordCipher
from .crypto.sealed_box import NONCE_SIZE, SealedBox
from .entry import Entry
from .errors import AlreadyExists, DeserializationError, NotFound

logger = structlog.get_logger(__name__)


def _not_found(name: str, what: str = "entry") -> NotFound:
    return NotFound(f"no {what} found with name {name!r}")


class Folder:
    """Encrypted map of entries.

    Each entry is compressed, encrypted with a PasswordCipher and wrapped
    in a fresh SealedBox. The stream-cipher nonce for every entry is kept
    in ``nonces`` under the same name; ``entries`` and ``nonces`` always
    have identical key sets.
    """

    def __init__(
        self,
        name: str = "",
        entries: Optional[Dict[str, SealedBox]] = None,
        nonces: Optional[Dict[str, bytes]] = None,
    ):
        self.name = name
        self.entries: Dict[str, SealedBox] = dict(entries or {})
        self.nonces: Dict[str, bytes] = dict(nonces or {})
        if self.entries.keys() != self.nonces.keys():
            raise ValueError("entries and nonces must have the same names")

    def _encrypt_and_insert(self, entry: Entry, cipher: PasswordCipher) -> None:
        encrypted = cipher.encrypt(codec.compress(entry))
        with encrypted.ciphertext as ciphertext:
            sealed = SealedBox.close(ciphertext)
        # both maps are written only after every fallible step succeeded
        self.entries[entry.name] = sealed
        self.nonces[entry.name] = encrypted.nonce

    def add_entry(self, entry: Entry, cipher: PasswordCipher) -> Entry:
        """Encrypt and insert a new entry.

        Raises:
            AlreadyExists: If an entry with the same name is present.
        """
        if entry.name in self.entries:
            raise AlreadyExists(f"entry {entry.name!r} already exists")
        self._encrypt_and_insert(entry, cipher)
        logger.info("entry_added", folder=self.name, entry=entry.name)
        return entry

    def update_entry(self, entry: Entry, cipher: PasswordCipher) -> Entry:
        """Re-encrypt and overwrite an existing entry.

        Raises:
            NotFound: If no entry with that name is present.
        """
        if entry.name not in self.entries:
            raise _not_found(entry.name)
        self._encrypt_and_insert(entry, cipher)
        logger.info("entry_updated", folder=self.name, entry=entry.name)
        return entry

    def get_nonce(self, name: str) -> bytes:
        try:
            return self.nonces[name]
        except KeyError:
            raise _not_found(name, "entry (nonce)") from None

    def get(self, name: str, cipher: PasswordCipher) -> Entry:
        """Open, decrypt and decode the named entry.

        Raises:
            NotFound: If the name is missing from either map.
            DecryptionError: If the sealed box was tampered with.
        """
        try:
            sealed = self.entries[name]
        except KeyError:
            raise _not_found(name) from None
        nonce = self.get_nonce(name)

        with sealed.open() as ciphertext:
            encrypted = CipherText(ciphertext=ciphertext, nonce=nonce)
            with cipher.decrypt(encrypted.ciphertext, encrypted.nonce) as plaintext:
                entry = codec.decompress(Entry, plaintext.to_bytes())
        logger.debug("entry_read", folder=self.name, entry=name)
        return entry

    def delete(self, name: str) -> bool:
        """Remove the named entry and its nonce.

        Raises:
            NotFound: If the name is missing from either map.
        """
        if name not in self.entries or name not in self.nonces:
            raise _not_found(name)
        sealed = self.entries.pop(name)
        del self.nonces[name]
        sealed.destroy()
        logger.info("entry_deleted", folder=self.name, entry=name)
        return True

    def names(self) -> List[str]:
        return sorted(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Folder):
            return NotImplemented
        return (
            self.name == other.name
            and self.entries == other.entries
            and self.nonces == other.nonces
        )

    def __repr__(self) -> str:
        return f"Folder(name={self.name!r}, entries={self.names()!r})"

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_str(self.name)
        encoder.write_map(self.entries, encoder.write_str, encoder.write_value)
        encoder.write_map(
            self.nonces,
            encoder.write_str,
            lambda nonce: encoder.write_fixed(nonce, NONCE_SIZE),
        )

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "Folder":
        name = decoder.read_str()
        entries = decoder.read_map(decoder.read_str, lambda: decoder.read_value(SealedBox))
        nonces = decoder.read_map(decoder.read_str, lambda: decoder.read_fixed(NONCE_SIZE))
        if entries.keys() != nonces.keys():
            raise DeserializationError("entries and nonces have different names")
        return cls(name=name, entries=entries, nonces=nonces)

    def to_compressed_bytes(self) -> bytes:
        """The at-rest blob for this folder."""
        return codec.compress(self)

    @classmethod
    def from_compressed_bytes(cls, data: bytes) -> "Folder":
        return codec.decompress(cls, data)


class PlainFolder:
    """Unencrypted map of entries with the same add/update/get/delete rules
    as Folder."""

    def __init__(self, name: str = "", entries: Optional[Dict[str, Entry]] = None):
        self.name = name
        self.entries: Dict[str, Entry] = dict(entries or {})

    def add_entry(self, entry: Entry) -> Entry:
        if entry.name in self.entries:
            raise AlreadyExists(f"entry {entry.name!r} already exists")
        self.entries[entry.name] = entry.model_copy(deep=True)
        logger.info("entry_added", folder=self.name, entry=entry.name)
        return entry

    def update_entry(self, entry: Entry) -> Entry:
        if entry.name not in self.entries:
            raise _not_found(entry.name)
        self.entries[entry.name] = entry.model_copy(deep=True)
        logger.info("entry_updated", folder=self.name, entry=entry.name)
        return entry

    def get(self, name: str) -> Entry:
        try:
            return self.entries[name].model_copy(deep=True)
        except KeyError:
            raise _not_found(name) from None

    def delete(self, name: str) -> bool:
        if name not in self.entries:
            raise _not_found(name)
        del self.entries[name]
        logger.info("entry_deleted", folder=self.name, entry=name)
        return True

    def names(self) -> List[str]:
        return sorted(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlainFolder):
            return NotImplemented
        return self.name == other.name and self.entries == other.entries

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_str(self.name)
        encoder.write_map(self.entries, encoder.write_str, encoder.write_value)

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "PlainFolder":
        name = decoder.read_str()
        return cls(name=name, entries=decoder.read_map(decoder.read_str, lambda: decoder.read_value(Entry)))

    def to_compressed_bytes(self) -> bytes:
        return codec.compress(self)

    @classmethod
    def from_compressed_bytes(cls, data: bytes) -> "PlainFolder":
        return codec.decompress(cls, data)
