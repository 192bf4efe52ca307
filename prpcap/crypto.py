"""Authenticated encryption using XChaCha20-Poly1305."""

import os

from Crypto.Cipher import ChaCha20_Poly1305

from .error import DecryptionFailure
from .types import KEY_LEN, NONCE_SIZE, TAG_SIZE


def rand_bytes(n: int) -> bytes:
    """Generate n random bytes using OS-provided secure random."""
    return os.urandom(n)


def zero_bytes(data: bytearray) -> None:
    """
    Securely zero a bytearray to prevent sensitive data from lingering in memory.
    Note: Python doesn't guarantee memory clearing, but we overwrite anyway.
    """
    for i in range(len(data)):
        data[i] = 0


def encrypt(key: bytes, nonce: bytes, ad: bytes, pt: bytes) -> bytes:
    """
    Encrypt plaintext with XChaCha20-Poly1305.

    Args:
        key: Shared secret (32 bytes)
        nonce: Random nonce (24 bytes)
        ad: Associated data (message header)
        pt: Plaintext

    Returns:
        Ciphertext with authentication tag
    """
    if len(key) != KEY_LEN:
        raise ValueError(f"key must be {KEY_LEN} bytes")
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"nonce must be {NONCE_SIZE} bytes")
    cipher = ChaCha20_Poly1305.new(key=key, nonce=nonce)
    cipher.update(ad)
    ciphertext, tag = cipher.encrypt_and_digest(pt)
    return ciphertext + tag


def decrypt(key: bytes, nonce: bytes, ad: bytes, ct: bytes) -> bytes:
    """
    Decrypt ciphertext with XChaCha20-Poly1305.

    Args:
        key: Shared secret (32 bytes)
        nonce: Nonce used for encryption (24 bytes)
        ad: Associated data (message header)
        ct: Ciphertext with authentication tag

    Returns:
        Decrypted plaintext

    Raises:
        DecryptionFailure: If decryption or authentication fails
    """
    if len(ct) < TAG_SIZE:
        raise DecryptionFailure("Ciphertext too short")
    if len(nonce) != NONCE_SIZE:
        raise DecryptionFailure("Bad nonce length")

    ciphertext = ct[:-TAG_SIZE]
    tag = ct[-TAG_SIZE:]

    cipher = ChaCha20_Poly1305.new(key=key, nonce=nonce)
    cipher.update(ad)

    try:
        return cipher.decrypt_and_verify(ciphertext, tag)
    except ValueError as e:
        raise DecryptionFailure(f"Decryption failed: {e}")
