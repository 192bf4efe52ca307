"""Convergence: sender and receiver sides of the PRP-Cap key agreement."""

import hmac
import logging
import time
from typing import Optional, Tuple

from .capability import (
    EpochKeyPair,
    compute_capability,
    compute_private_scalar,
    generate_ephemeral,
)
from .crypto import decrypt, encrypt, rand_bytes
from .error import ConvergenceMismatch, EpochExpired, InvalidPointError
from .kdf import PointLike, derive_shared_secret, resolve_config
from .point import Point, as_point
from .types import NONCE_SIZE, Header, Message, PRPCapConfig, PublicEpochInfo, VERSION

logger = logging.getLogger("prpcap.handshake")


def _require_full_order(point: Point, what: str) -> Point:
    if point.is_small_order():
        raise InvalidPointError(f"{what} is a small-order point")
    return point


def sender_shared_secret(
    ephemeral_scalar: int,
    A: PointLike,
    B: PointLike,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    Sender view: KDF(e * V_i).

    Args:
        ephemeral_scalar: Sender's ephemeral secret e
        A: Receiver's epoch point A
        B: Receiver's epoch point B
        index: Capability index
        config: Protocol configuration

    Returns:
        Shared secret (32 bytes)
    """
    config = resolve_config(config)
    capability = _require_full_order(compute_capability(A, B, index, config), "capability")
    return derive_shared_secret(capability.multiply(ephemeral_scalar), config)


def receiver_shared_secret(
    s1: int,
    s2: int,
    A: PointLike,
    B: PointLike,
    ephemeral_public: PointLike,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    Receiver view: KDF(v_i * E).

    Raises:
        InvalidPointError: If E does not decode or has small order
    """
    config = resolve_config(config)
    E = _require_full_order(as_point(ephemeral_public), "ephemeral public key")
    v_i = compute_private_scalar(s1, s2, A, B, index, config)
    return derive_shared_secret(E.multiply(v_i), config)


def initiate(
    A: PointLike,
    B: PointLike,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> Tuple[bytes, bytes]:
    """
    Sender flow with a fresh ephemeral key pair.

    Returns:
        Tuple of (ephemeral_public, shared_secret)
    """
    ephemeral = generate_ephemeral()
    secret = sender_shared_secret(ephemeral.scalar, A, B, index, config)
    ephemeral.scalar = 0
    return ephemeral.public_bytes, secret


def respond(
    epoch: EpochKeyPair,
    ephemeral_public: PointLike,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    Receiver flow: recover the sender's shared secret from (E, index).

    Raises:
        EpochExpired: If the epoch secrets were erased
        InvalidPointError: If E is malformed
    """
    if epoch.erased:
        raise EpochExpired("epoch secrets have been erased")
    return receiver_shared_secret(
        epoch.s1, epoch.s2, epoch.A, epoch.B, ephemeral_public, index, config
    )


def verify_convergence(sender_secret: bytes, receiver_secret: bytes) -> None:
    """
    Constant-time check that both sides agree.

    Raises:
        ConvergenceMismatch: If the secrets differ
    """
    if not hmac.compare_digest(sender_secret, receiver_secret):
        raise ConvergenceMismatch("sender and receiver secrets differ")


def check_convergence(
    epoch: EpochKeyPair,
    index: int,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    Run both sides of the exchange against one epoch and return the
    agreed secret; DH(e, V_i) must equal DH(v_i, E).
    """
    ephemeral_public, sender_secret = initiate(epoch.A, epoch.B, index, config)
    receiver_secret = respond(epoch, ephemeral_public, index, config)
    verify_convergence(sender_secret, receiver_secret)
    return sender_secret


def create_message_with_secret(
    peer: PublicEpochInfo,
    plaintext: bytes,
    index: Optional[int] = None,
    config: Optional[PRPCapConfig] = None,
    now: Optional[float] = None,
) -> Tuple[Message, bytes]:
    """
    Build a 0-RTT message addressed to ``peer``'s current epoch.

    Args:
        peer: Receiver's public epoch parameters
        plaintext: Payload to encrypt
        index: Capability index (random when omitted)
        config: Protocol configuration
        now: Current time, for the epoch validity check

    Returns:
        Tuple of (message, shared_secret)

    Raises:
        EpochExpired: If the peer's epoch is not currently valid
    """
    config = resolve_config(config)
    now = time.time() if now is None else now
    if not peer.is_valid_at(now):
        raise EpochExpired(f"epoch {peer.epoch_id[:16]} is not valid at {int(now)}")
    if index is None:
        index = int.from_bytes(rand_bytes(config.index_width), "big")

    ephemeral_public, secret = initiate(peer.A, peer.B, index, config)

    header = Header(version=VERSION, index=index, ephemeral_public=ephemeral_public)
    nonce = rand_bytes(NONCE_SIZE)
    ct = encrypt(secret, nonce, header.to_json(), plaintext)
    logger.debug("created message for epoch %s at index %d", peer.epoch_id[:16], index)

    msg = Message(
        ephemeral_public=ephemeral_public,
        index=index,
        ciphertext=ct,
        nonce=nonce,
    )
    return msg, secret


def create_message(
    peer: PublicEpochInfo,
    plaintext: bytes,
    index: Optional[int] = None,
    config: Optional[PRPCapConfig] = None,
    now: Optional[float] = None,
) -> Message:
    """Encrypt ``plaintext`` to ``peer`` without any prior round trip."""
    msg, _secret = create_message_with_secret(peer, plaintext, index, config, now)
    return msg


def open_message(
    epoch: EpochKeyPair,
    msg: Message,
    config: Optional[PRPCapConfig] = None,
) -> bytes:
    """
    Decrypt a message with the epoch secrets, without session bookkeeping.

    Raises:
        DecryptionFailure: If the derived key does not authenticate the message
        InvalidPointError: If the ephemeral public key is malformed
    """
    secret = respond(epoch, msg.ephemeral_public, msg.index, config)
    return decrypt(secret, msg.nonce, msg.header.to_json(), msg.ciphertext)
