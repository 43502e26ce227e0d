"""Tests for password-derived stream encryption."""

import pytest
from argon2.exceptions import HashingError

from password_kvstore.config import HashParameters
from password_kvstore.crypto import ByteBuffer, KeyStream, PasswordCipher, SealedBox, hash_password
from password_kvstore.crypto import encryption
from password_kvstore.errors import PasswordHashingError


def test_default_hash_parameters():
    """Test the standard Argon2 parameters."""
    params = HashParameters()
    assert params.salt_length == 12
    assert params.hash_length == 42
    assert params.time_cost == 12
    assert params.memory_cost == 125_000
    assert params.parallelism == 2


def test_hash_password(fast_hash):
    """Test hashing with a fresh salt per call."""
    first = hash_password(b"password", fast_hash)
    second = hash_password(b"password", fast_hash)
    assert len(first.digest) == 42
    assert len(first.salt) == 12
    assert first.salt != second.salt
    assert first.digest != second.digest


def test_hash_password_failure(monkeypatch, fast_hash):
    """Test that primitive failures surface as PasswordHashingError."""

    def fail(**_):
        raise HashingError("memory allocation error")

    monkeypatch.setattr(encryption, "hash_secret_raw", fail)
    with pytest.raises(PasswordHashingError):
        hash_password(b"password", fast_hash)


def test_derive_key_is_deterministic(cipher, fast_hash):
    """Test key derivation for a fixed password and iteration count."""
    key = cipher.derive_key()
    assert len(key) == 32
    assert cipher.derive_key() == key
    assert PasswordCipher("password", 600, fast_hash).derive_key() == key
    assert PasswordCipher("password", 601, fast_hash).derive_key() != key
    assert PasswordCipher("passwore", 600, fast_hash).derive_key() != key


def test_derive_nonce_is_fresh(cipher):
    """Test that nonces are not reproducible from the password."""
    first = cipher.derive_nonce()
    second = cipher.derive_nonce()
    assert len(first) == 12
    assert first != second


def test_derive_hash(cipher):
    """Test the hash over the sealed password."""
    password_hash = cipher.derive_hash()
    assert len(password_hash.digest) == 42
    assert len(password_hash.salt) == 12
    password_hash.destroy()
    assert password_hash.digest == bytes(42)


def test_encrypt_decrypt_round_trip(cipher):
    """Test decrypting with the nonce returned by encrypt."""
    secret = "".join(f"{h}-secret-{h}-" for h in range(137)).encode()
    encrypted = cipher.encrypt(secret)
    assert len(encrypted.nonce) == 12
    assert len(encrypted.ciphertext) == len(secret)
    assert encrypted.ciphertext != secret
    assert cipher.decrypt(encrypted.ciphertext, encrypted.nonce) == secret


def test_encrypt_empty(cipher):
    """Test encrypting nothing."""
    encrypted = cipher.encrypt(b"")
    assert cipher.decrypt(encrypted.ciphertext, encrypted.nonce) == b""


def test_same_plaintext_encrypts_differently(cipher):
    """Test that fresh nonces give distinct ciphertexts."""
    assert cipher.encrypt(b"same").ciphertext != cipher.encrypt(b"same").ciphertext


def test_keystream_with_chosen_nonce(cipher):
    """Test that applying the keystream twice restores the plaintext."""
    nonce = bytes(range(12))
    plaintext = ByteBuffer(b"attack at dawn")
    ciphertext = cipher.apply_keystream(plaintext, nonce)
    assert cipher.decrypt(ciphertext, nonce) == plaintext
    assert cipher.decrypt(ciphertext, bytes(12)) != plaintext


def test_stream_offset(cipher):
    """Test that the keystream starts after iterations + password length."""
    nonce = bytes(range(12))
    offset = 600 + len("password")
    key = cipher.derive_key().to_bytes()
    full = KeyStream(key, nonce).apply(bytes(offset + 100))
    stream = cipher.build_stream(nonce)
    assert stream.position == offset
    assert stream.apply(bytes(100)) == full[offset:]


def test_keystream_seek_across_blocks():
    """Test seeking to offsets inside and across 64-byte blocks."""
    key = bytes(range(32))
    nonce = bytes(12)
    full = KeyStream(key, nonce).apply(bytes(300))
    for offset in (0, 1, 63, 64, 65, 200):
        assert KeyStream(key, nonce, offset).apply(bytes(300 - offset)) == full[offset:]


def test_no_integrity(cipher):
    """Test that corrupted ciphertext decrypts silently."""
    encrypted = cipher.encrypt(b"secret")
    corrupted = encrypted.ciphertext.copy()
    corrupted[0] ^= 0x01
    plaintext = cipher.decrypt(corrupted, encrypted.nonce)
    assert plaintext != b"secret"
    assert plaintext[1:] == b"ecret"


def test_password_is_sealed(cipher):
    """Test that the password is not held in the clear."""
    assert b"password" not in cipher._password.ciphertext.to_bytes()
    assert "password" not in repr(cipher)


def test_invalid_iterations(fast_hash):
    """Test iteration bounds."""
    with pytest.raises(ValueError):
        PasswordCipher("password", 0, fast_hash)


def test_destroy(fast_hash):
    """Test that the context manager wipes the sealed password."""
    with PasswordCipher("password", 10, fast_hash) as cipher:
        cipher.derive_key()
    assert cipher._password.ciphertext == bytes(len(cipher._password.ciphertext))


@pytest.fixture
def tracked_buffers(monkeypatch):
    """Record every ByteBuffer created while the test runs."""
    created = []
    original_init = ByteBuffer.__init__

    def tracking_init(self, *args, **kwargs):
        original_init(self, *args, **kwargs)
        created.append(self)

    monkeypatch.setattr(ByteBuffer, "__init__", tracking_init)
    return created


def holding(buffers, secret):
    return [buf for buf in buffers if secret in buf.to_bytes()]


def test_password_buffers_are_wiped(tracked_buffers, fast_hash):
    """Test that no live buffer keeps the password after derivations."""
    with PasswordCipher("hunter2-secret", 10, fast_hash) as tool:
        assert holding(tracked_buffers, b"hunter2-secret") == []
        with tool.derive_key():
            pass
        tool.derive_nonce()
        tool.derive_hash().destroy()
        assert holding(tracked_buffers, b"hunter2-secret") == []


def test_plaintext_buffers_are_wiped(tracked_buffers, cipher):
    """Test that encryption leaves no copy of the plaintext behind."""
    encrypted = cipher.encrypt(b"very-secret-plaintext")
    assert holding(tracked_buffers, b"very-secret-plaintext") == []
    with cipher.decrypt(encrypted.ciphertext, encrypted.nonce) as plaintext:
        assert plaintext == b"very-secret-plaintext"
    assert holding(tracked_buffers, b"very-secret-plaintext") == []


def test_sealing_does_not_copy_plaintext(tracked_buffers):
    """Test that sealing a buffer creates no extra plaintext buffer."""
    with ByteBuffer(b"sealed-secret") as raw:
        box = SealedBox.close(raw)
    with box.open():
        pass
    assert holding(tracked_buffers, b"sealed-secret") == []
