"""Constants and types for the PRP-Cap protocol."""

import base64
import json
from dataclasses import dataclass
from typing import Any

from Crypto.Hash import SHA512

from .error import ConfigError


# Protocol version
VERSION: int = 1

# Shared secret length in bytes
KEY_LEN: int = 32

# Wire sizes
POINT_SIZE: int = 32
SCALAR_SIZE: int = 32
NONCE_SIZE: int = 24
TAG_SIZE: int = 16

# Index width bounds in bytes
MIN_INDEX_WIDTH: int = 4
MAX_INDEX_WIDTH: int = 16

# Domain separation strings
DOMAIN_TAG: bytes = b"PRP-CAP-v1"
SINGLE_LADDER_INFO: bytes = b"PRP-CAP-v1/SingleLadder"
DOUBLE_LADDER_TAG: bytes = b"PRP-CAP-v1/DoubleLadder"

# 30 days, in seconds
DEFAULT_EPOCH_DURATION: int = 30 * 24 * 60 * 60

DEFAULT_MAX_MESSAGES_PER_EPOCH: int = 1000


@dataclass
class PRPCapConfig:
    """Derivation parameters shared by sender and receiver.

    Both sides must use identical values; the hash module is carried here
    rather than configured globally so every derivation is a pure function
    of its arguments.
    """

    domain_tag: bytes = DOMAIN_TAG
    index_width: int = MIN_INDEX_WIDTH
    hashmod: Any = SHA512
    kdf_info: bytes = SINGLE_LADDER_INFO
    double_ladder_tag: bytes = DOUBLE_LADDER_TAG
    epoch_duration: int = DEFAULT_EPOCH_DURATION
    max_messages_per_epoch: int = DEFAULT_MAX_MESSAGES_PER_EPOCH

    @classmethod
    def default(cls) -> "PRPCapConfig":
        """Return the default configuration."""
        return cls()

    def validate(self) -> None:
        """Validate the configuration, raises ConfigError if invalid."""
        if not self.domain_tag:
            raise ConfigError("domain_tag must not be empty")
        if self.domain_tag == self.double_ladder_tag:
            raise ConfigError("double_ladder_tag must differ from domain_tag")
        if not MIN_INDEX_WIDTH <= self.index_width <= MAX_INDEX_WIDTH:
            raise ConfigError(
                f"index_width must be between {MIN_INDEX_WIDTH} and {MAX_INDEX_WIDTH}"
            )
        digest_size = getattr(self.hashmod, "digest_size", 0)
        if digest_size < 2 * SCALAR_SIZE:
            raise ConfigError(
                f"hash digest must be at least {2 * SCALAR_SIZE} bytes, got {digest_size}"
            )
        if self.epoch_duration <= 0:
            raise ConfigError("epoch_duration must be positive")
        if self.max_messages_per_epoch < 1:
            raise ConfigError("max_messages_per_epoch must be >= 1")


@dataclass
class PublicEpochInfo:
    """Receiver's shareable epoch parameters."""

    A: bytes  # s1*G (32 bytes)
    B: bytes  # s2*G (32 bytes)
    valid_from: int
    valid_until: int
    epoch_id: str  # hex SHA-256 of A || B

    def is_valid_at(self, now: float) -> bool:
        return self.valid_from <= now < self.valid_until


@dataclass
class Header:
    """Message header, bound to the ciphertext as associated data."""

    version: int
    index: int
    ephemeral_public: bytes

    def to_json(self) -> bytes:
        """Serialize header to JSON bytes."""
        return json.dumps({
            "v": self.version,
            "i": self.index,
            "e": base64.b64encode(self.ephemeral_public).decode("ascii"),
        }).encode()


@dataclass
class Message:
    """0-RTT message envelope."""

    ephemeral_public: bytes  # E = e*G (32 bytes)
    index: int  # capability index i
    ciphertext: bytes  # ciphertext || tag
    nonce: bytes  # 24-byte AEAD nonce
    version: int = VERSION

    @property
    def header(self) -> Header:
        return Header(
            version=self.version,
            index=self.index,
            ephemeral_public=self.ephemeral_public,
        )

    def to_json(self) -> bytes:
        """Serialize message to JSON bytes."""
        return json.dumps({
            "v": self.version,
            "i": self.index,
            "e": base64.b64encode(self.ephemeral_public).decode("ascii"),
            "c": base64.b64encode(self.ciphertext).decode("ascii"),
            "n": base64.b64encode(self.nonce).decode("ascii"),
        }).encode()

    @classmethod
    def from_json(cls, data: bytes) -> "Message":
        """
        Deserialize message from JSON bytes.

        Raises:
            ValueError: If the index or version is not a non-negative integer
        """
        d = json.loads(data)
        for key in ("i", "v"):
            value = d[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"message field {key!r} must be a non-negative integer")
        return cls(
            ephemeral_public=base64.b64decode(d["e"]),
            index=d["i"],
            ciphertext=base64.b64decode(d["c"]),
            nonce=base64.b64decode(d["n"]),
            version=d["v"],
        )
