"""
Exception types raised by the key search engine.
"""


class GenkeysError(Exception):
    """Base class for all key search errors."""


class AddressInvariantError(GenkeysError, AssertionError):
    """Raised when a public key has more leading one-bits (after inversion)
    than the address format can encode."""


class KeyDerivationError(GenkeysError):
    """Raised when the Ed25519 primitive fails to derive a keypair."""


class SettingsError(GenkeysError, ValueError):
    """Raised for invalid search settings."""
