"""PRP-Cap error types."""


class PRPCapError(Exception):
    """Base exception for PRP-Cap protocol errors."""
    pass


class InvalidPointError(PRPCapError, ValueError):
    """Byte string does not decode to a usable curve point."""
    pass


class DomainError(PRPCapError, ArithmeticError):
    """Modular inverse requested for a non-invertible value."""
    pass


class ConvergenceMismatch(PRPCapError):
    """Sender and receiver derived different shared secrets."""
    pass


class DecryptionFailure(PRPCapError):
    """AEAD decryption failed."""
    pass


class EpochExpired(PRPCapError):
    """Epoch is outside its validity window or its secrets were erased."""
    pass


class EpochExhausted(PRPCapError):
    """Epoch message limit reached."""
    pass


class IndexReused(PRPCapError):
    """Capability index already consumed in this epoch."""
    pass


class ConfigError(PRPCapError):
    """Configuration error."""
    pass
