"""Epoch key pairs and capability derivation (V_i = A + t_i*B, v_i = s1 + t_i*s2)."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .crypto import rand_bytes
from .error import EpochExpired
from .field import N, reduce_scalar, scalar_to_bytes
from .kdf import PointLike, capability_scalar, derive_epoch_id, resolve_config
from .point import G, Point, as_point
from .types import SCALAR_SIZE, PRPCapConfig, PublicEpochInfo

logger = logging.getLogger("prpcap.capability")


def random_scalar() -> int:
    """Uniform non-zero scalar, reduced from 64 random bytes."""
    while True:
        s = int.from_bytes(rand_bytes(2 * SCALAR_SIZE), "little") % N
        if s:
            return s


@dataclass
class EphemeralKeyPair:
    """Sender's per-message key pair (e, E = e*G)."""

    scalar: int
    public: Point

    @classmethod
    def generate(cls) -> "EphemeralKeyPair":
        e = random_scalar()
        return cls(scalar=e, public=G.multiply(e))

    @property
    def public_bytes(self) -> bytes:
        return self.public.encode()


@dataclass
class EpochKeyPair:
    """Receiver's epoch secrets {s1, s2} and their public points {A, B}."""

    s1: int
    s2: int
    A: Point
    B: Point
    valid_from: int
    valid_until: int
    epoch_id: str
    erased: bool = False

    @classmethod
    def from_scalars(
        cls,
        s1: int,
        s2: int,
        valid_from: int,
        valid_until: int,
    ) -> "EpochKeyPair":
        s1 = reduce_scalar(s1)
        s2 = reduce_scalar(s2)
        A = G.multiply(s1)
        B = G.multiply(s2)
        return cls(
            s1=s1,
            s2=s2,
            A=A,
            B=B,
            valid_from=valid_from,
            valid_until=valid_until,
            epoch_id=derive_epoch_id(A, B),
        )

    def public_info(self) -> PublicEpochInfo:
        return PublicEpochInfo(
            A=self.A.encode(),
            B=self.B.encode(),
            valid_from=self.valid_from,
            valid_until=self.valid_until,
            epoch_id=self.epoch_id,
        )

    def secret_bytes(self) -> tuple:
        """(s1, s2) as 32-byte little-endian encodings."""
        if self.erased:
            raise EpochExpired("epoch secrets have been erased")
        return scalar_to_bytes(self.s1), scalar_to_bytes(self.s2)

    def zero(self) -> None:
        """Erase the secret scalars; the public half stays usable."""
        # Note: Python doesn't guarantee memory clearing, but we overwrite anyway
        self.s1 = 0
        self.s2 = 0
        self.erased = True


def generate_epoch(
    now: Optional[float] = None,
    config: Optional[PRPCapConfig] = None,
) -> EpochKeyPair:
    """
    Generate a fresh epoch key pair valid for ``config.epoch_duration``.

    Args:
        now: Start of the validity window (defaults to the current time)
        config: Protocol configuration

    Returns:
        New EpochKeyPair
    """
    config = resolve_config(config)
    start = int(time.time() if now is None else now)
    epoch = EpochKeyPair.from_scalars(
        random_scalar(),
        random_scalar(),
        valid_from=start,
        valid_until=start + config.epoch_duration,
    )
    logger.debug("generated epoch %s", epoch.epoch_id[:16])
    return epoch


def generate_ephemeral() -> EphemeralKeyPair:
    return EphemeralKeyPair.generate()


def compute_capability(
    A: PointLike,
    B: PointLike,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> Point:
    """
    Public capability V_i = A + t_i*B.

    Uses only public values; any party holding (A, B) may evaluate it.
    """
    t_i = capability_scalar(index, A, B, config)
    return as_point(A).add(as_point(B).multiply(t_i))


def compute_private_scalar(
    s1: int,
    s2: int,
    A: PointLike,
    B: PointLike,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> int:
    """
    Private scalar v_i = (s1 + t_i*s2) mod n matching compute_capability.

    Requires the epoch secrets; never expose the result outside the
    receiver.
    """
    t_i = capability_scalar(index, A, B, config)
    return (reduce_scalar(s1) + t_i * reduce_scalar(s2)) % N
