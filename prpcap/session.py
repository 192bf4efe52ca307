"""Receiver session: epoch ownership, rotation and inbound message processing."""

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Dict, Optional, Set, Tuple

from .capability import EpochKeyPair, generate_epoch
from .crypto import decrypt, zero_bytes
from .error import (
    DecryptionFailure,
    EpochExhausted,
    EpochExpired,
    IndexReused,
    PRPCapError,
)
from .handshake import create_message_with_secret, respond
from .kdf import merge_ladders, resolve_config
from .types import Message, PRPCapConfig, PublicEpochInfo

logger = logging.getLogger("prpcap.session")


@dataclass
class PendingInitiation:
    """Our outbound half of a possible double ladder."""

    ephemeral_public: bytes
    secret: bytearray
    expires_at: float  # peer epoch's valid_until

    def zero(self) -> None:
        zero_bytes(self.secret)


@dataclass
class DoubleLadderResult:
    """Inbound plaintext plus the secret merged from both directions."""

    plaintext: bytes
    merged_secret: bytes


class Session:
    """Session state for one PRP-Cap receiver identity."""

    def __init__(
        self,
        epoch: Optional[EpochKeyPair] = None,
        config: Optional[PRPCapConfig] = None,
        now: Optional[float] = None,
    ):
        """
        Create a session around an epoch key pair.

        Args:
            epoch: Initial epoch (generated when omitted)
            config: Protocol configuration shared with peers
            now: Start of the generated epoch's validity window
        """
        self._lock = threading.Lock()
        self._config = resolve_config(config)

        self._epoch = epoch if epoch is not None else generate_epoch(now, self._config)
        self._used_indices: Set[int] = set()
        self._generation: int = 0

        self._pending: Dict[str, PendingInitiation] = {}

    @property
    def config(self) -> PRPCapConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Number of rotations performed."""
        with self._lock:
            return self._generation

    @property
    def epoch_id(self) -> str:
        with self._lock:
            return self._epoch.epoch_id

    def public_info(self) -> PublicEpochInfo:
        """Current epoch's shareable parameters."""
        with self._lock:
            return self._epoch.public_info()

    def used_index_count(self) -> int:
        with self._lock:
            return len(self._used_indices)

    def needs_rotation(self, now: Optional[float] = None) -> bool:
        """True once the epoch expired or its message limit is reached."""
        now = time.time() if now is None else now
        with self._lock:
            if now >= self._epoch.valid_until:
                return True
            return len(self._used_indices) >= self._config.max_messages_per_epoch

    def _snapshot(self) -> Tuple[EpochKeyPair, Set[int]]:
        """Copy of the current epoch and its index set; caller holds the lock."""
        return replace(self._epoch), self._used_indices

    # =========================================================================
    # Epoch rotation
    # =========================================================================

    def rotate(self, now: Optional[float] = None) -> PublicEpochInfo:
        """
        Replace the epoch with a fresh one and erase the old secrets.

        Pending outbound halves are erased as well; a reply to them would be
        addressed to the epoch being retired.

        The swap is atomic: operations that already took a snapshot finish
        against the old values, later operations only see the new epoch.

        Returns:
            Public parameters of the new epoch
        """
        new_epoch = generate_epoch(now, self._config)
        with self._lock:
            old_epoch = self._epoch
            self._epoch = new_epoch
            self._used_indices = set()
            self._generation += 1
            old_epoch.zero()
            self._clear_pending()
        logger.info(
            "rotated epoch %s -> %s", old_epoch.epoch_id[:16], new_epoch.epoch_id[:16]
        )
        return new_epoch.public_info()

    # =========================================================================
    # Inbound messages
    # =========================================================================

    def _receive(
        self, msg: Message, now: Optional[float]
    ) -> Optional[Tuple[bytes, bytes]]:
        now = time.time() if now is None else now
        with self._lock:
            epoch, used = self._snapshot()
            if epoch.erased or not epoch.valid_from <= now < epoch.valid_until:
                raise EpochExpired(f"epoch {epoch.epoch_id[:16]} is not valid")
            if msg.index in used:
                raise IndexReused(f"index {msg.index} already consumed")
            if len(used) >= self._config.max_messages_per_epoch:
                raise EpochExhausted("Epoch exhausted: rotation required")

        secret = respond(epoch, msg.ephemeral_public, msg.index, self._config)
        try:
            pt = decrypt(secret, msg.nonce, msg.header.to_json(), msg.ciphertext)
        except DecryptionFailure as e:
            logger.debug("rejected message at index %d: %s", msg.index, e)
            return None

        with self._lock:
            # re-check: concurrent calls may have consumed the index or the limit
            if msg.index in used:
                raise IndexReused(f"index {msg.index} already consumed")
            if len(used) >= self._config.max_messages_per_epoch:
                raise EpochExhausted("Epoch exhausted: rotation required")
            used.add(msg.index)
        return pt, secret

    def process_message(
        self, msg: Message, now: Optional[float] = None
    ) -> Optional[bytes]:
        """
        Decrypt an inbound 0-RTT message.

        Args:
            msg: Message addressed to this session's epoch
            now: Current time, for the epoch validity check

        Returns:
            Plaintext, or None when the derived key does not authenticate
            the message (wrong epoch, tampered index or ciphertext)

        Raises:
            InvalidPointError: If the ephemeral public key is malformed
            EpochExpired: If the epoch is outside its validity window
            IndexReused: If the index was already consumed in this epoch
            EpochExhausted: If the epoch reached its message limit
        """
        result = self._receive(msg, now)
        if result is None:
            return None
        pt, _secret = result
        return pt

    # =========================================================================
    # Outbound initiation and double ladder
    # =========================================================================

    def initiate(
        self,
        peer: PublicEpochInfo,
        plaintext: bytes,
        index: Optional[int] = None,
        now: Optional[float] = None,
    ) -> Message:
        """
        Send a 0-RTT message to a peer and remember our half of the exchange
        in case the peer initiates simultaneously.

        The pending half lives until the peer's epoch expires, a double
        ladder completes, ``discard_pending`` is called or we rotate.
        """
        now = time.time() if now is None else now
        msg, secret = create_message_with_secret(
            peer, plaintext, index, self._config, now
        )
        with self._lock:
            self._prune_pending(now)
            previous = self._pending.get(peer.epoch_id)
            if previous is not None:
                previous.zero()
            self._pending[peer.epoch_id] = PendingInitiation(
                ephemeral_public=msg.ephemeral_public,
                secret=bytearray(secret),
                expires_at=peer.valid_until,
            )
        return msg

    def _prune_pending(self, now: float) -> None:
        """Erase pending halves whose peer epoch has expired; caller holds the lock."""
        expired = [k for k, p in self._pending.items() if now >= p.expires_at]
        for peer_epoch_id in expired:
            self._pending.pop(peer_epoch_id).zero()
        if expired:
            logger.debug("dropped %d expired pending initiations", len(expired))

    def _clear_pending(self) -> None:
        for pending in self._pending.values():
            pending.zero()
        self._pending.clear()

    def has_pending(self, peer_epoch_id: str, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        with self._lock:
            self._prune_pending(now)
            return peer_epoch_id in self._pending

    def pending_count(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        with self._lock:
            self._prune_pending(now)
            return len(self._pending)

    def discard_pending(self, peer_epoch_id: str) -> bool:
        """
        Erase our pending half for a peer once no reply is expected.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            pending = self._pending.pop(peer_epoch_id, None)
        if pending is None:
            return False
        pending.zero()
        return True

    def complete_double_ladder(
        self,
        peer_epoch_id: str,
        inbound: Message,
        now: Optional[float] = None,
    ) -> Optional[DoubleLadderResult]:
        """
        Merge our pending initiation with the peer's simultaneous one.

        Both parties derive the same merged secret regardless of which side
        computes first.

        Returns:
            DoubleLadderResult, or None if the inbound message does not
            authenticate (the pending initiation is kept in that case)

        Raises:
            PRPCapError: If no unexpired initiation to this peer is pending
        """
        now = time.time() if now is None else now
        with self._lock:
            self._prune_pending(now)
            pending = self._pending.get(peer_epoch_id)
        if pending is None:
            raise PRPCapError(f"no pending initiation to {peer_epoch_id[:16]}")

        result = self._receive(inbound, now)
        if result is None:
            return None
        pt, inbound_secret = result

        with self._lock:
            if self._pending.get(peer_epoch_id) is not pending:
                raise PRPCapError(f"pending initiation to {peer_epoch_id[:16]} was discarded")
            del self._pending[peer_epoch_id]
            merged = merge_ladders(
                bytes(pending.secret),
                pending.ephemeral_public,
                inbound_secret,
                inbound.ephemeral_public,
                self._config,
            )
        pending.zero()
        logger.debug("double ladder with %s complete", peer_epoch_id[:16])
        return DoubleLadderResult(plaintext=pt, merged_secret=merged)
