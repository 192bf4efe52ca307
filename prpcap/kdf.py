"""Domain-separated derivations: capability scalars, shared secrets, ladder merge."""

import hashlib
import logging
from typing import Optional, Union

from Crypto.Protocol.KDF import HKDF

from .field import N
from .point import Point, as_encoding
from .types import KEY_LEN, PRPCapConfig

logger = logging.getLogger("prpcap.kdf")

PointLike = Union[Point, bytes]


def resolve_config(config: Optional[PRPCapConfig]) -> PRPCapConfig:
    """Return a validated config, substituting the default for ``None``."""
    if config is None:
        config = PRPCapConfig()
    config.validate()
    return config


def encode_index(index: int, width: int) -> bytes:
    """
    Big-endian fixed-width index encoding.

    Raises:
        ValueError: If the index is negative or does not fit in ``width`` bytes
    """
    if index < 0:
        raise ValueError("index must be non-negative")
    if index >> (8 * width):
        raise ValueError(f"index {index} does not fit in {width} bytes")
    return index.to_bytes(width, "big")


def hkdf_expand(secret: bytes, info: bytes, hashmod, length: int = KEY_LEN) -> bytes:
    """Derive a key using HKDF with the configured hash."""
    return HKDF(secret, length, salt=b"", num_keys=1, hashmod=hashmod, context=info)


def hash_to_scalar(
    domain_tag: bytes,
    index: int,
    A: PointLike,
    B: PointLike,
    config: Optional[PRPCapConfig] = None,
) -> int:
    """
    Derive t_i = H(tag || BE(index) || A || B) mod n.

    The configured hash must produce at least twice the scalar width so
    the reduction modulo n is free of noticeable bias.

    Args:
        domain_tag: ASCII domain separation tag
        index: Capability index
        A: Epoch public point A (or its encoding)
        B: Epoch public point B (or its encoding)
        config: Derivation parameters (hash, index width)

    Returns:
        Scalar in [0, n)
    """
    config = resolve_config(config)
    data = (
        domain_tag
        + encode_index(index, config.index_width)
        + as_encoding(A)
        + as_encoding(B)
    )
    digest = config.hashmod.new(data).digest()
    return int.from_bytes(digest, "little") % N


def capability_scalar(
    index: int,
    A: PointLike,
    B: PointLike,
    config: Optional[PRPCapConfig] = None,
) -> int:
    """t_i under the configured protocol domain tag."""
    config = resolve_config(config)
    return hash_to_scalar(config.domain_tag, index, A, B, config)


def derive_shared_secret(
    shared_point: Point,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    KDF applied to the encoding of the agreed point.

    SharedSecret = HKDF(encode(shared_point), kdf_info)
    """
    config = resolve_config(config)
    return hkdf_expand(shared_point.encode(), config.kdf_info, config.hashmod)


def merge_ladders(
    secret_x: bytes,
    ephemeral_x: PointLike,
    secret_y: bytes,
    ephemeral_y: PointLike,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    Merge the two directions of a simultaneous initiation.

    Each secret is paired with the ephemeral public of the exchange that
    produced it.  The pairs are ordered by unsigned lexicographic
    comparison of the ephemeral encodings, so the result does not depend
    on which pair the caller passes first.

    Merged = H(first || second || double_ladder_tag)[:KEY_LEN]
    """
    config = resolve_config(config)
    ex = as_encoding(ephemeral_x)
    ey = as_encoding(ephemeral_y)
    if ex == ey:
        raise ValueError("both directions use the same ephemeral public key")
    if ex < ey:
        first, second = secret_x, secret_y
    else:
        first, second = secret_y, secret_x
    digest = config.hashmod.new(first + second + config.double_ladder_tag).digest()
    logger.debug("merged double-ladder secrets")
    return digest[:KEY_LEN]


def derive_epoch_id(A: PointLike, B: PointLike) -> str:
    """Epoch identifier: hex SHA-256 of A || B."""
    h = hashlib.sha256()
    h.update(as_encoding(A))
    h.update(as_encoding(B))
    return h.hexdigest()
