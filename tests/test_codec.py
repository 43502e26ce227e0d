"""Tests for the binary codec and compression."""

import pytest

from password_kvstore import Entry, Folder, PlainFolder, Secret, codec
from password_kvstore.crypto import ByteBuffer, CipherText, SealedBox
from password_kvstore.errors import DecodingError, DeserializationError, EncodingError


def u64(value: int) -> bytes:
    return value.to_bytes(8, "little")


@pytest.fixture
def entry() -> Entry:
    return Entry(name="entry", password=Secret.from_plaintext("entry"))


def test_entry_layout(entry):
    """Test the fixed field layout of an entry."""
    expected = (
        u64(5) + b"entry"          # name
        + u64(0)                   # username
        + u64(5) + b"entry" + u64(5)  # password data and len
        + u64(0)                   # description
        + u64(0)                   # email
        + u64(0)                   # urls
        + u64(0)                   # attributes
    )
    assert codec.encode(entry) == expected
    assert codec.decode(Entry, expected) == entry


def test_inflates_existing_blob(entry):
    """Test reading a deflate stream produced by another encoder."""
    blob = bytes([
        133, 136, 161, 13, 0, 0, 8, 195, 102, 118, 42, 22, 65, 48, 124, 143, 0, 18, 220,
        170, 218, 18, 131, 121, 70, 173, 131, 127, 94, 40, 26,
    ])
    assert codec.decompress(Entry, blob) == entry
    assert Entry.from_compressed_bytes(blob) == entry


def test_entry_round_trip():
    """Test a fully populated entry."""
    entry = Entry(
        name="bank",
        username="alice",
        password="s3cr3t",
        description="checking account",
        email="alice@example.com",
        urls=["https://bank.example", "https://m.bank.example"],
        attributes={"pin": "0000", "answer": "blue", "empty": ""},
    )
    assert codec.decode(Entry, codec.encode(entry)) == entry
    assert codec.decompress(Entry, codec.compress(entry)) == entry


def test_empty_values_round_trip():
    """Test zero-length fields and empty maps."""
    entry = Entry(name="")
    assert codec.decompress(Entry, codec.compress(entry)) == entry
    assert codec.decompress(Folder, codec.compress(Folder())) == Folder()
    assert codec.decompress(PlainFolder, codec.compress(PlainFolder())) == PlainFolder()
    assert codec.decode(Secret, codec.encode(Secret())) == Secret()


def test_maps_encode_sorted():
    """Test that insertion order does not affect the encoding."""
    first = Entry(name="x", attributes={"a": "1", "b": "2"})
    second = Entry(name="x", attributes={"b": "2", "a": "1"})
    assert codec.encode(first) == codec.encode(second)


def test_sealed_box_round_trip():
    """Test encoding a sealed box with its key and nonce."""
    box = SealedBox.close(b"payload")
    encoded = codec.encode(box)
    assert len(encoded) == 8 + len(box.ciphertext) + 32 + 12
    restored = codec.decode(SealedBox, encoded)
    assert restored == box
    assert restored.open() == b"payload"


def test_cipher_text_round_trip():
    """Test encoding ciphertext with its nonce."""
    value = CipherText(ciphertext=ByteBuffer(b"abc"), nonce=bytes(range(12)))
    assert codec.decompress(CipherText, codec.compress(value)) == value


def test_plain_folder_round_trip():
    """Test the unencrypted folder."""
    folder = PlainFolder(name="plain")
    folder.add_entry(Entry(name="one", password="1"))
    folder.add_entry(Entry(name="two", urls=["https://two.example"]))
    assert PlainFolder.from_compressed_bytes(folder.to_compressed_bytes()) == folder


def test_trailing_bytes_rejected(entry):
    """Test that extra bytes after a value fail."""
    with pytest.raises(DeserializationError):
        codec.decode(Entry, codec.encode(entry) + b"\x00")


def test_truncated_input_rejected(entry):
    """Test that a cut-off encoding fails."""
    encoded = codec.encode(entry)
    with pytest.raises(DeserializationError):
        codec.decode(Entry, encoded[:-1])
    with pytest.raises(DeserializationError):
        codec.decode(Entry, b"")


def test_oversized_length_rejected():
    """Test a length prefix larger than the input."""
    with pytest.raises(DeserializationError):
        codec.decode(ByteBuffer, u64(2**40) + b"abc")


def test_invalid_utf8_string_rejected():
    """Test non-UTF-8 bytes in a string field."""
    with pytest.raises(DeserializationError):
        codec.decode(Entry, u64(1) + b"\xff" + u64(0) * 8)


def test_invalid_deflate_rejected(entry):
    """Test malformed and truncated deflate streams."""
    with pytest.raises(DecodingError):
        codec.decompress(Entry, b"\xff\xff\xff")
    compressed = codec.compress(entry)
    with pytest.raises(DecodingError):
        codec.decompress(Entry, compressed[: len(compressed) // 2])


def test_encode_rejects_unsupported_values():
    """Test encoding values without the codec capability."""
    with pytest.raises(EncodingError):
        codec.encode(object())
    with pytest.raises(EncodingError):
        codec.encode(Entry.model_construct(name=5))


def test_plain_bytes_protocol():
    """Test which types provide the serialization capability."""
    for value in (ByteBuffer(), Secret(), Entry(name="x"), Folder(), PlainFolder()):
        assert isinstance(value, codec.PlainBytes)
    assert not isinstance(b"raw", codec.PlainBytes)
