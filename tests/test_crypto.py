"""Tests for the AEAD wrapper."""

import pytest

from prpcap import DecryptionFailure, decrypt, encrypt, rand_bytes, zero_bytes


def test_encrypt_decrypt():
    key = rand_bytes(32)
    nonce = rand_bytes(24)
    ct = encrypt(key, nonce, b"header", b"payload")
    assert len(ct) == len(b"payload") + 16
    assert decrypt(key, nonce, b"header", ct) == b"payload"


def test_decrypt_fails_closed():
    """Wrong key, wrong AD or a flipped bit raise DecryptionFailure."""
    key = rand_bytes(32)
    nonce = rand_bytes(24)
    ct = encrypt(key, nonce, b"header", b"payload")

    with pytest.raises(DecryptionFailure):
        decrypt(rand_bytes(32), nonce, b"header", ct)
    with pytest.raises(DecryptionFailure):
        decrypt(key, nonce, b"other", ct)
    tampered = bytes([ct[0] ^ 1]) + ct[1:]
    with pytest.raises(DecryptionFailure):
        decrypt(key, nonce, b"header", tampered)
    with pytest.raises(DecryptionFailure):
        decrypt(key, nonce, b"header", ct[:10])
    with pytest.raises(DecryptionFailure):
        decrypt(key, nonce[:12], b"header", ct)


def test_encrypt_rejects_bad_sizes():
    with pytest.raises(ValueError):
        encrypt(bytes(16), bytes(24), b"", b"x")
    with pytest.raises(ValueError):
        encrypt(bytes(32), bytes(12), b"", b"x")


def test_zero_bytes():
    data = bytearray(b"secret")
    zero_bytes(data)
    assert data == bytearray(6)
