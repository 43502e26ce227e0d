"""Credential records."""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import codec
from .errors import InvalidUtf8

REDACTION_CHAR = "*"


class Secret:
    """Secret bytes that never render their content by default.

    ``str()`` and ``repr()`` produce one ``*`` per byte. The raw value is
    only available through ``plaintext()`` and ``as_bytes()``.
    """

    __slots__ = ("_data", "_len")

    def __init__(self, data: bytes = b""):
        self._data = bytes(data)
        self._len = len(self._data)

    @classmethod
    def from_plaintext(cls, plaintext: Any) -> "Secret":
        return cls(str(plaintext).encode("utf-8"))

    def plaintext(self) -> str:
        """Return the secret as text.

        Raises:
            InvalidUtf8: If the bytes are not valid UTF-8.
        """
        try:
            return self._data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidUtf8(f"secret is not valid utf-8: {e}") from e

    def as_bytes(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return self._len

    def __str__(self) -> str:
        return REDACTION_CHAR * self._len

    def __repr__(self) -> str:
        return f"Secret({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return self._data == other._data and self._len == other._len

    __hash__ = None  # type: ignore[assignment]

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_bytes(self._data)
        encoder.write_u64(self._len)

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "Secret":
        secret = cls(decoder.read_bytes())
        secret._len = decoder.read_u64()
        return secret


def _to_secret(value: Union[Secret, str, bytes]) -> Secret:
    if isinstance(value, Secret):
        return value
    if isinstance(value, (bytes, bytearray)):
        return Secret(value)
    return Secret.from_plaintext(value)


class Entry(BaseModel):
    """A named credential record."""

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    name: str
    username: str = ""
    password: Secret = Field(default_factory=Secret)
    description: str = ""
    email: str = ""
    urls: List[str] = Field(default_factory=list)
    attributes: Dict[str, Secret] = Field(default_factory=dict)

    @field_validator("password", mode="before")
    @classmethod
    def _coerce_password(cls, value: Any) -> Secret:
        return _to_secret(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def _coerce_attributes(cls, value: Any) -> Dict[str, Secret]:
        return {key: _to_secret(item) for key, item in dict(value).items()}

    @classmethod
    def from_name(cls, name: str) -> "Entry":
        return cls(name=name)

    def encode_fields(self, encoder: codec.Encoder) -> None:
        encoder.write_str(self.name)
        encoder.write_str(self.username)
        encoder.write_value(self.password)
        encoder.write_str(self.description)
        encoder.write_str(self.email)
        encoder.write_seq(self.urls, encoder.write_str)
        encoder.write_map(self.attributes, encoder.write_str, encoder.write_value)

    @classmethod
    def decode_fields(cls, decoder: codec.Decoder) -> "Entry":
        return cls(
            name=decoder.read_str(),
            username=decoder.read_str(),
            password=decoder.read_value(Secret),
            description=decoder.read_str(),
            email=decoder.read_str(),
            urls=decoder.read_seq(decoder.read_str),
            attributes=decoder.read_map(decoder.read_str, lambda: decoder.read_value(Secret)),
        )

    def to_compressed_bytes(self) -> bytes:
        return codec.compress(self)

    @classmethod
    def from_compressed_bytes(cls, data: bytes) -> "Entry":
        return codec.decompress(cls, data)
