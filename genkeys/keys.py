"""
Ed25519 seeds and keypairs.

Keys are derived with libsodium's seeded keypair function (via PyNaCl), so a
secret key is always the 64-byte libsodium layout: [seed][public_key].

KEY INSIGHT: a search only draws ONE random seed per worker. Every following
keypair comes from the previous seed + 1 (big-endian, mod 2^256). Incrementing
is far cheaper than asking the OS for 32 fresh bytes per attempt, and since the
starting point is random the enumerated keys stay unpredictable to an outsider.
"""

from dataclasses import dataclass

from nacl.bindings import crypto_sign_seed_keypair
from nacl.exceptions import CryptoError
from nacl.utils import random as random_bytes

from .errors import KeyDerivationError

PUBLIC_KEY_SIZE = 32
SECRET_KEY_SIZE = 64
SEED_SIZE = 32


def to_hex(data) -> str:
    """Lowercase hex, two characters per byte."""
    return bytes(data).hex()


def from_hex(hex_str: str, size: int = None) -> bytes:
    """Parse a hex string, optionally enforcing the decoded length."""
    try:
        data = bytes.fromhex(hex_str.strip())
    except ValueError:
        raise ValueError(f"Invalid hex string: {hex_str!r}")
    if size is not None and len(data) != size:
        raise ValueError(f"Expected {size} bytes, got {len(data)}")
    return data


class Seed:
    """32-byte big-endian counter used to derive keypairs."""

    __slots__ = ("_bytes",)

    def __init__(self, data=None):
        if data is None:
            self._bytes = bytearray(SEED_SIZE)
        else:
            if len(data) != SEED_SIZE:
                raise ValueError(f"Seed must be {SEED_SIZE} bytes, got {len(data)}")
            self._bytes = bytearray(data)

    @classmethod
    def random(cls) -> 'Seed':
        """Create a seed from the CSPRNG."""
        return cls(random_bytes(SEED_SIZE))

    @classmethod
    def from_hex(cls, hex_str: str) -> 'Seed':
        return cls(from_hex(hex_str, SEED_SIZE))

    def increment(self) -> 'Seed':
        """Add one, wrapping from all-0xFF to all-zero."""
        data = self._bytes
        for i in range(SEED_SIZE - 1, -1, -1):
            if data[i] != 0xFF:
                data[i] += 1
                return self
            data[i] = 0
        return self

    def wipe(self):
        """Zero the seed in place."""
        self._bytes[:] = bytes(SEED_SIZE)

    def hex(self) -> str:
        return to_hex(self._bytes)

    def __bytes__(self):
        return bytes(self._bytes)

    def __len__(self):
        return SEED_SIZE

    def __eq__(self, other):
        if isinstance(other, Seed):
            return self._bytes == other._bytes
        return NotImplemented

    def __repr__(self):
        return f"Seed({self.hex()})"


@dataclass(frozen=True)
class KeyPair:
    """Container for a derived keypair and the seed it came from."""
    public_key: bytes
    secret_key: bytes
    seed: bytes

    @property
    def public_hex(self) -> str:
        return to_hex(self.public_key)

    @property
    def secret_hex(self) -> str:
        return to_hex(self.secret_key)

    @property
    def seed_hex(self) -> str:
        return to_hex(self.seed)


def derive_keypair(seed) -> KeyPair:
    """Derive the Ed25519 keypair for a seed.

    Raises:
        KeyDerivationError: if libsodium rejects the seed
    """
    seed_bytes = bytes(seed)
    try:
        public_key, secret_key = crypto_sign_seed_keypair(seed_bytes)
    except CryptoError as e:
        raise KeyDerivationError(f"Keypair derivation failed: {e}") from e
    return KeyPair(public_key=public_key, secret_key=secret_key, seed=seed_bytes)


def keypair_from_secret(secret_hex: str) -> KeyPair:
    """Rebuild a keypair from a 64-byte secret key or a bare 32-byte seed (hex).

    A 64-byte secret key must embed the public key its seed derives to.
    """
    data = from_hex(secret_hex)
    if len(data) not in (SEED_SIZE, SECRET_KEY_SIZE):
        raise ValueError(f"Secret key must be {SEED_SIZE} or {SECRET_KEY_SIZE} bytes, got {len(data)}")

    keys = derive_keypair(data[:SEED_SIZE])
    if len(data) == SECRET_KEY_SIZE and data != keys.secret_key:
        raise ValueError("Secret key does not match the public key derived from its seed")
    return keys
