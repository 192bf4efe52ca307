"""Tests for modular arithmetic and byte conventions."""

import pytest

from prpcap import (
    P,
    N,
    DomainError,
    InvalidPointError,
    mod,
    mod_inverse,
    mod_pow,
    scalar_from_bytes,
    scalar_to_bytes,
    encode_index,
)
from prpcap.field import sqrt_ratio, bytes_to_int_le, int_to_bytes_le


def test_mod_is_non_negative():
    """mod always returns a residue in [0, m)."""
    assert mod(-5, 7) == 2
    assert mod(12, 7) == 5
    assert mod(-P, P) == 0
    assert mod(-1, N) == N - 1


def test_mod_inverse():
    """Extended Euclid inverse agrees with Fermat inversion."""
    assert mod_inverse(3, 7) == 5
    for a in (2, 12345, P - 2, 2**200 + 7):
        assert (a * mod_inverse(a, P)) % P == 1
        assert mod_inverse(a, P) == pow(a, P - 2, P)
    assert (N - 1) * mod_inverse(N - 1, N) % N == 1


def test_mod_inverse_negative_input():
    """Negative inputs are reduced before inversion."""
    assert (-3 * mod_inverse(-3, P)) % P == 1


def test_mod_inverse_not_invertible():
    """Non-invertible inputs raise DomainError."""
    with pytest.raises(DomainError):
        mod_inverse(6, 9)
    with pytest.raises(DomainError):
        mod_inverse(0, P)
    with pytest.raises(ArithmeticError):
        mod_inverse(N, N)


def test_mod_pow():
    """Square-and-multiply matches the builtin."""
    for base, exp in ((2, 10), (7, 0), (P - 1, 3), (123456789, P - 2)):
        assert mod_pow(base, exp, P) == pow(base, exp, P)
    assert mod_pow(5, 3, 1) == 0
    assert mod_pow(-2, 3, 7) == pow(-2, 3, 7)
    with pytest.raises(ValueError):
        mod_pow(2, -1, P)


def test_sqrt_ratio():
    """Field square root of u/v."""
    x = sqrt_ratio(4, 1)
    assert (x * x) % P == 4
    x = sqrt_ratio(9, 4)
    assert (x * x * 4) % P == 9
    # p = 5 mod 8, so 2 is not a square
    with pytest.raises(InvalidPointError):
        sqrt_ratio(2, 1)


def test_little_endian_conversion():
    """Byte/int conversion is little-endian."""
    assert bytes_to_int_le(b"\x01\x02") == 0x0201
    assert int_to_bytes_le(0x0201, 4) == b"\x01\x02\x00\x00"


def test_scalar_encoding_is_little_endian():
    """Scalars are 32-byte little-endian."""
    assert scalar_to_bytes(1) == b"\x01" + bytes(31)
    assert scalar_to_bytes(N - 1)[-1] == 0x10
    assert scalar_from_bytes(scalar_to_bytes(N - 1)) == N - 1


def test_scalar_encoding_requires_reduced_values():
    """Unreduced scalars are rejected on encode; reduced on decode by default."""
    with pytest.raises(ValueError):
        scalar_to_bytes(N)
    with pytest.raises(ValueError):
        scalar_to_bytes(-1)

    n_bytes = N.to_bytes(32, "little")
    assert scalar_from_bytes(n_bytes) == 0
    with pytest.raises(ValueError):
        scalar_from_bytes(n_bytes, reduce=False)
    with pytest.raises(ValueError):
        scalar_from_bytes(bytes(31))


def test_index_and_scalar_conventions_differ():
    """Index is big-endian while scalars are little-endian."""
    assert encode_index(1, 4) == b"\x00\x00\x00\x01"
    assert scalar_to_bytes(1)[:4] == b"\x01\x00\x00\x00"
    assert encode_index(0x01020304, 4) == bytes([1, 2, 3, 4])
    assert int_to_bytes_le(0x01020304, 4) == bytes([4, 3, 2, 1])


def test_index_range():
    """Indices must fit the configured width."""
    assert encode_index(2**32 - 1, 4) == b"\xff" * 4
    assert encode_index(2**32, 8) == b"\x00\x00\x00\x01\x00\x00\x00\x00"
    with pytest.raises(ValueError):
        encode_index(2**32, 4)
    with pytest.raises(ValueError):
        encode_index(-1, 4)
