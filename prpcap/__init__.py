"""
PRP-Cap: Pseudorandom Public Capabilities

0-round-trip key agreement on edwards25519.  A receiver publishes two
epoch points (A, B); any sender derives a fresh one-time public key

    V_i = A + t_i*B,   t_i = H(tag || i || A || B) mod n

for any index i, while the receiver recovers the matching private scalar
v_i = s1 + t_i*s2 mod n.  Both sides converge on KDF(e*V_i) = KDF(v_i*E).

Features:
- Pure-Python edwards25519 point and scalar arithmetic
- Domain-separated, configurable hash-to-scalar derivation
- XChaCha20-Poly1305 message envelope
- Forward secrecy via epoch rotation
- Double-ladder merge for simultaneous initiation
"""

from .types import (
    VERSION,
    KEY_LEN,
    POINT_SIZE,
    SCALAR_SIZE,
    NONCE_SIZE,
    DOMAIN_TAG,
    SINGLE_LADDER_INFO,
    DOUBLE_LADDER_TAG,
    DEFAULT_EPOCH_DURATION,
    DEFAULT_MAX_MESSAGES_PER_EPOCH,
    PRPCapConfig,
    PublicEpochInfo,
    Header,
    Message,
)
from .field import (
    P,
    N,
    mod,
    mod_inverse,
    mod_pow,
    scalar_from_bytes,
    scalar_to_bytes,
)
from .point import Point, G, to_montgomery, from_montgomery
from .kdf import (
    encode_index,
    hash_to_scalar,
    capability_scalar,
    derive_shared_secret,
    merge_ladders,
    derive_epoch_id,
)
from .capability import (
    EpochKeyPair,
    EphemeralKeyPair,
    generate_epoch,
    generate_ephemeral,
    random_scalar,
    compute_capability,
    compute_private_scalar,
)
from .handshake import (
    sender_shared_secret,
    receiver_shared_secret,
    initiate,
    respond,
    verify_convergence,
    check_convergence,
    create_message,
    open_message,
)
from .crypto import encrypt, decrypt, rand_bytes, zero_bytes
from .session import Session, DoubleLadderResult
from .error import (
    PRPCapError,
    InvalidPointError,
    DomainError,
    ConvergenceMismatch,
    DecryptionFailure,
    EpochExpired,
    EpochExhausted,
    IndexReused,
    ConfigError,
)

__version__ = "0.1.0"
__all__ = [
    # Constants
    "VERSION",
    "KEY_LEN",
    "POINT_SIZE",
    "SCALAR_SIZE",
    "NONCE_SIZE",
    "DOMAIN_TAG",
    "SINGLE_LADDER_INFO",
    "DOUBLE_LADDER_TAG",
    "DEFAULT_EPOCH_DURATION",
    "DEFAULT_MAX_MESSAGES_PER_EPOCH",
    # Types
    "PRPCapConfig",
    "PublicEpochInfo",
    "Header",
    "Message",
    # Arithmetic
    "P",
    "N",
    "mod",
    "mod_inverse",
    "mod_pow",
    "scalar_from_bytes",
    "scalar_to_bytes",
    "Point",
    "G",
    "to_montgomery",
    "from_montgomery",
    # KDF
    "encode_index",
    "hash_to_scalar",
    "capability_scalar",
    "derive_shared_secret",
    "merge_ladders",
    "derive_epoch_id",
    # Capability
    "EpochKeyPair",
    "EphemeralKeyPair",
    "generate_epoch",
    "generate_ephemeral",
    "random_scalar",
    "compute_capability",
    "compute_private_scalar",
    # Handshake
    "sender_shared_secret",
    "receiver_shared_secret",
    "initiate",
    "respond",
    "verify_convergence",
    "check_convergence",
    "create_message",
    "open_message",
    # Crypto
    "encrypt",
    "decrypt",
    "rand_bytes",
    "zero_bytes",
    # Session
    "Session",
    "DoubleLadderResult",
    # Error
    "PRPCapError",
    "InvalidPointError",
    "DomainError",
    "ConvergenceMismatch",
    "DecryptionFailure",
    "EpochExpired",
    "EpochExhausted",
    "IndexReused",
    "ConfigError",
]
