"""
Point arithmetic on edwards25519 in pure Python.

Points are kept in extended twisted-Edwards coordinates (X : Y : Z : T)
with x = X/Z, y = Y/Z, x·y = T/Z.  The addition and doubling formulas
are the complete ones for a = -1 (Hisil-Wong-Carter-Dawson 2008), so
the identity and P + P need no special casing.

The external form is the RFC 8032 32-byte encoding: y little-endian
with the sign of x in the top bit of the last byte.

References
----------
- RFC 8032 §5.1   Ed25519 parameters, encoding and decoding
- RFC 7748 §4.1   birational map to Curve25519
"""

from __future__ import annotations

from .error import InvalidPointError
from .field import (
    P,
    N,
    D,
    mod_inverse,
    sqrt_ratio,
    bytes_to_int_le,
    int_to_bytes_le,
)
from .types import POINT_SIZE

_Y_MASK = (1 << 255) - 1
_D2 = (2 * D) % P


class Point:
    """Element of the edwards25519 group."""

    __slots__ = ("_x", "_y", "_z", "_t")

    def __init__(self, x: int, y: int, z: int = 1, t: int | None = None) -> None:
        self._x = x % P
        self._y = y % P
        self._z = z % P
        self._t = (x * y) % P if t is None else t % P

    # constructors -----------------------------------------------------------
    @classmethod
    def identity(cls) -> Point:
        """Neutral element (0, 1)."""
        return cls(0, 1, 1, 0)

    @classmethod
    def base(cls) -> Point:
        """Canonical base point *G* (y = 4/5, x even)."""
        return cls.decode(_BASE_ENCODING)

    @classmethod
    def decode(cls, data: bytes) -> Point:
        """
        Recover a point from its 32-byte compressed form.

        Solves x² = (y² - 1) / (d·y² + 1) and picks the root whose
        parity matches the encoded sign bit.  Raises ``InvalidPointError``
        for wrong length, non-canonical y, non-squares and the
        negative-zero encoding.
        """
        if len(data) != POINT_SIZE:
            raise InvalidPointError(f"need {POINT_SIZE} bytes, got {len(data)}")
        raw = bytes_to_int_le(data)
        y = raw & _Y_MASK
        sign = raw >> 255
        if y >= P:
            raise InvalidPointError("non-canonical y coordinate")
        yy = (y * y) % P
        x = sqrt_ratio(yy - 1, D * yy + 1)
        if x == 0 and sign:
            raise InvalidPointError("x = 0 with sign bit set")
        if (x & 1) != sign:
            x = P - x
        return cls(x, y)

    # serialisation ----------------------------------------------------------
    def affine(self) -> tuple[int, int]:
        """Normalised (x, y); divides out the projective Z."""
        z_inv = mod_inverse(self._z, P)
        return (self._x * z_inv) % P, (self._y * z_inv) % P

    def encode(self) -> bytes:
        x, y = self.affine()
        return int_to_bytes_le(y | ((x & 1) << 255), POINT_SIZE)

    # group operations -------------------------------------------------------
    def add(self, other: Point) -> Point:
        X1, Y1, Z1, T1 = self._x, self._y, self._z, self._t
        X2, Y2, Z2, T2 = other._x, other._y, other._z, other._t
        a = ((Y1 - X1) * (Y2 - X2)) % P
        b = ((Y1 + X1) * (Y2 + X2)) % P
        c = (T1 * _D2 * T2) % P
        d = (Z1 * 2 * Z2) % P
        e = b - a
        f = d - c
        g = d + c
        h = b + a
        return Point(e * f, g * h, f * g, e * h)

    def double(self) -> Point:
        X1, Y1, Z1 = self._x, self._y, self._z
        a = (X1 * X1) % P
        b = (Y1 * Y1) % P
        c = (2 * Z1 * Z1) % P
        h = a + b
        e = h - ((X1 + Y1) * (X1 + Y1)) % P
        g = a - b
        f = c + g
        return Point(e * f, g * h, f * g, e * h)

    def multiply(self, scalar: int) -> Point:
        """
        Scalar multiplication ``scalar · self``.

        The scalar is reduced modulo the group order first, then processed
        least-significant bit upward (double-and-add).
        """
        k = scalar % N
        result = Point.identity()
        addend = self
        while k:
            if k & 1:
                result = result.add(addend)
            addend = addend.double()
            k >>= 1
        return result

    def is_identity(self) -> bool:
        return self._x == 0 and self._y == self._z

    def is_small_order(self) -> bool:
        """True if ``8·self`` is the identity (includes the identity itself)."""
        return self.double().double().double().is_identity()

    # operators --------------------------------------------------------------
    def __add__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        return self.add(o)

    def __neg__(self) -> Point:
        return Point(-self._x, self._y, self._z, -self._t)

    def __sub__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        return self.add(-o)

    def __mul__(self, s):
        if isinstance(s, int):
            return self.multiply(s)
        return NotImplemented

    __rmul__ = __mul__

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Point):
            return False
        # cross-multiplied projective comparison
        return (
            (self._x * o._z - o._x * self._z) % P == 0
            and (self._y * o._z - o._y * self._z) % P == 0
        )

    def __hash__(self) -> int:
        return hash(self.encode())

    def __repr__(self) -> str:
        return f"Point({self.encode().hex()[:16]}…)"


# ── transport-boundary conversion (RFC 7748 birational map) ─────────────
def to_montgomery(point: Point) -> bytes:
    """Curve25519 u-coordinate u = (1 + y) / (1 - y), 32 bytes LE."""
    _, y = point.affine()
    if y == 1:
        raise InvalidPointError("identity has no Montgomery u-coordinate")
    u = ((1 + y) * mod_inverse(1 - y, P)) % P
    return int_to_bytes_le(u, POINT_SIZE)


def from_montgomery(u_bytes: bytes, sign: int = 0) -> Point:
    """
    Edwards point for a Curve25519 u-coordinate.

    The u-coordinate loses the sign of x; *sign* selects it (0 = even).
    """
    if len(u_bytes) != POINT_SIZE:
        raise InvalidPointError(f"need {POINT_SIZE} bytes, got {len(u_bytes)}")
    u = bytes_to_int_le(u_bytes) & _Y_MASK
    if (u + 1) % P == 0:
        raise InvalidPointError("u = -1 has no Edwards image")
    y = ((u - 1) * mod_inverse(u + 1, P)) % P
    return Point.decode(int_to_bytes_le(y | ((sign & 1) << 255), POINT_SIZE))


# ── module-level generator ──────────────────────────────────────────────
_BASE_ENCODING = bytes.fromhex(
    "5866666666666666666666666666666666666666666666666666666666666666"
)

G = Point.base()


def as_point(value: Point | bytes) -> Point:
    """Accept either a ``Point`` or its 32-byte encoding."""
    if isinstance(value, Point):
        return value
    return Point.decode(bytes(value))


def as_encoding(value: Point | bytes) -> bytes:
    """Accept either a ``Point`` or its 32-byte encoding; return the encoding."""
    if isinstance(value, Point):
        return value.encode()
    data = bytes(value)
    if len(data) != POINT_SIZE:
        raise InvalidPointError(f"need {POINT_SIZE} bytes, got {len(data)}")
    return data
