"""Tests for edwards25519 point arithmetic and encoding."""

import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from prpcap import (
    G,
    P,
    N,
    InvalidPointError,
    Point,
    random_scalar,
    to_montgomery,
    from_montgomery,
)
from prpcap.field import int_to_bytes_le

BASE_X = 15112221349535400772501151409588531511454012693041857206046113283949847762202
BASE_Y = 46316835694926478169428394003475163141307993866256225615783033603165251855960


def clamp(data: bytes) -> int:
    """RFC 8032 / RFC 7748 scalar clamping."""
    k = bytearray(data[:32])
    k[0] &= 248
    k[31] &= 127
    k[31] |= 64
    return int.from_bytes(bytes(k), "little")


def test_base_point():
    """G matches the RFC 8032 base point."""
    assert G.affine() == (BASE_X, BASE_Y)
    assert G.encode() == bytes.fromhex(
        "5866666666666666666666666666666666666666666666666666666666666666"
    )


def test_identity_encoding():
    """The identity encodes as y = 1, x = 0."""
    identity = Point.identity()
    assert identity.encode() == b"\x01" + bytes(31)
    assert Point.decode(identity.encode()).is_identity()


def test_round_trip():
    """decode(encode(P)) == P."""
    for k in (1, 2, 3, 8, N - 1, random_scalar(), random_scalar()):
        point = G.multiply(k)
        decoded = Point.decode(point.encode())
        assert decoded == point
        assert decoded.encode() == point.encode()


def test_group_law():
    """a*G + b*G == (a + b mod n)*G."""
    for _ in range(3):
        a = random_scalar()
        b = random_scalar()
        assert G.multiply(a) + G.multiply(b) == G.multiply((a + b) % N)


def test_double_matches_add():
    """Doubling equals adding a point to itself."""
    point = G.multiply(random_scalar())
    assert point.double() == point.add(point)
    assert G.double() == G.multiply(2)


def test_identity_is_neutral():
    """Complete formulas handle the identity without special cases."""
    point = G.multiply(random_scalar())
    identity = Point.identity()
    assert point + identity == point
    assert identity + point == point
    assert identity.double().is_identity()
    assert (point - point).is_identity()
    assert (point + (-point)).is_identity()


def test_multiply_reduces_scalar():
    """Any integer scalar is reduced modulo n first."""
    assert G.multiply(0).is_identity()
    assert G.multiply(N).is_identity()
    assert G.multiply(N + 5) == G.multiply(5)
    assert G.multiply(-1) == -G
    assert 3 * G == G.multiply(3)
    assert G * 3 == G + G + G


def test_rfc8032_public_key_vector():
    """RFC 8032 §7.1 test 1: secret key to public key."""
    secret = bytes.fromhex(
        "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
    )
    a = clamp(hashlib.sha512(secret).digest())
    assert G.multiply(a).encode() == bytes.fromhex(
        "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"
    )


def test_matches_cryptography_ed25519():
    """Scalar multiplication agrees with an independent Ed25519 implementation."""
    for seed in (bytes(32), bytes(range(32)), hashlib.sha256(b"prpcap").digest()):
        a = clamp(hashlib.sha512(seed).digest())
        expected = Ed25519PrivateKey.from_private_bytes(seed).public_key().public_bytes_raw()
        assert G.multiply(a).encode() == expected


def test_decode_rejects_wrong_length():
    with pytest.raises(InvalidPointError):
        Point.decode(bytes(31))
    with pytest.raises(InvalidPointError):
        Point.decode(bytes(33))


def test_decode_rejects_non_canonical_y():
    """y >= p is rejected instead of being reduced."""
    with pytest.raises(InvalidPointError):
        Point.decode(int_to_bytes_le(P, 32))
    with pytest.raises(InvalidPointError):
        Point.decode(int_to_bytes_le(P + 1, 32))


def test_decode_rejects_negative_zero():
    """x = 0 with the sign bit set is not a valid encoding."""
    with pytest.raises(InvalidPointError):
        Point.decode(b"\x01" + bytes(30) + b"\x80")


def test_decode_rejects_off_curve():
    """Some y values have no matching x; decode must fail, not substitute."""
    failures = 0
    for y in range(2, 40):
        try:
            point = Point.decode(int_to_bytes_le(y, 32))
        except InvalidPointError:
            failures += 1
        else:
            assert point.affine()[1] == y
    assert failures > 0


def test_small_order_points():
    """Identity and the order-2 point are small-order; G is not."""
    order_two = Point.decode(int_to_bytes_le(P - 1, 32))
    assert not order_two.is_identity()
    assert order_two.double().is_identity()
    assert order_two.is_small_order()
    assert Point.identity().is_small_order()
    assert not G.is_small_order()


def test_montgomery_base_point():
    """G maps to the Curve25519 base point u = 9."""
    assert to_montgomery(G) == int_to_bytes_le(9, 32)


def test_montgomery_matches_x25519():
    """to_montgomery(k*G) equals the X25519 public key for clamped k."""
    for seed in (bytes(range(32)), hashlib.sha256(b"x25519").digest()):
        k = clamp(seed)
        expected = X25519PrivateKey.from_private_bytes(
            int_to_bytes_le(k, 32)
        ).public_key().public_bytes_raw()
        assert to_montgomery(G.multiply(k)) == expected


def test_montgomery_round_trip():
    """from_montgomery recovers the Edwards point given the sign of x."""
    point = G.multiply(random_scalar())
    sign = point.encode()[31] >> 7
    assert from_montgomery(to_montgomery(point), sign) == point
    assert from_montgomery(to_montgomery(point), sign ^ 1) == -point


def test_montgomery_rejects_identity():
    with pytest.raises(InvalidPointError):
        to_montgomery(Point.identity())
    with pytest.raises(InvalidPointError):
        from_montgomery(int_to_bytes_le(P - 1, 32))
