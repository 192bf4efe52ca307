"""
Modular arithmetic over the edwards25519 prime field and group order.

All values are plain Python ``int``.  Byte conversion is little-endian
everywhere in this package; the only big-endian quantity on the wire is
the capability index, which is encoded in :pymod:`kdf`.
"""

from __future__ import annotations

from .error import DomainError, InvalidPointError
from .types import SCALAR_SIZE

# ── edwards25519 constants (RFC 8032 §5.1) ──────────────────────────────
P = 2**255 - 19
N = 2**252 + 27742317777372353535851937790883648493
D = 37095705934669439343138083508754565189542113879843219016388785533085940283555
SQRT_M1 = 19681161376707505956807079304988542015446066515923890162744021073123829784752


# ── generic modular helpers ─────────────────────────────────────────────
def mod(a: int, m: int) -> int:
    """Non-negative residue of *a* modulo *m*."""
    if m <= 0:
        raise ValueError("modulus must be positive")
    return a % m


def mod_inverse(a: int, m: int) -> int:
    """
    Inverse of *a* modulo *m* via the extended Euclidean algorithm.

    Raises ``DomainError`` when ``gcd(a, m) != 1``.
    """
    old_r, r = mod(a, m), m
    old_s, s = 1, 0
    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
    if old_r != 1:
        raise DomainError(f"value is not invertible modulo m (gcd = {old_r})")
    return mod(old_s, m)


def mod_pow(base: int, exp: int, m: int) -> int:
    """Square-and-multiply exponentiation; *exp* must be non-negative."""
    if exp < 0:
        raise ValueError("negative exponent")
    result = 1 % m
    base = mod(base, m)
    while exp > 0:
        if exp & 1:
            result = (result * base) % m
        base = (base * base) % m
        exp >>= 1
    return result


# ── byte conversion ─────────────────────────────────────────────────────
def bytes_to_int_le(data: bytes) -> int:
    return int.from_bytes(data, "little")


def int_to_bytes_le(value: int, length: int) -> bytes:
    return value.to_bytes(length, "little")


# ── field square root ───────────────────────────────────────────────────
def sqrt_ratio(u: int, v: int) -> int:
    """
    Return *x* with ``x² · v == u (mod p)``.

    Uses ``x = (u/v)^((p+3)/8)`` and corrects by √-1 when needed
    (valid because p ≡ 5 mod 8).  Raises ``InvalidPointError`` if u/v
    is not a square.
    """
    x2 = (u * mod_inverse(v, P)) % P
    x = mod_pow(x2, (P + 3) // 8, P)
    if (x * x - x2) % P != 0:
        x = (x * SQRT_M1) % P
    if (x * x - x2) % P != 0:
        raise InvalidPointError("no square root: not a curve point")
    return x


# ── scalars in Z_n ──────────────────────────────────────────────────────
def reduce_scalar(value: int) -> int:
    return mod(value, N)


def scalar_from_bytes(data: bytes, reduce: bool = True) -> int:
    """
    Parse a 32-byte little-endian scalar.

    With ``reduce=False`` an unreduced encoding is rejected instead of
    being reduced modulo *n*.
    """
    if len(data) != SCALAR_SIZE:
        raise ValueError(f"need {SCALAR_SIZE} bytes, got {len(data)}")
    v = bytes_to_int_le(data)
    if reduce:
        return v % N
    if v >= N:
        raise ValueError("scalar out of range")
    return v


def scalar_to_bytes(value: int) -> bytes:
    """32-byte little-endian encoding of an already-reduced scalar."""
    if not 0 <= value < N:
        raise ValueError("scalar must be reduced modulo the group order")
    return int_to_bytes_le(value, SCALAR_SIZE)
