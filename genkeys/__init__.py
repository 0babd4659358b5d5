"""
Yggdrasil Key Search Engine

This package contains the parallel key search organized by functionality:
- keys: seeds, keypair derivation and hex helpers
- address: public key to address derivation and formatting
- scoring: key/address scores and candidate ranking
- channel: thread-safe handoff queue
- worker: per-thread key generation loop
- coordinator: worker pool, global best and stop policy
- settings: search settings and config.ini loading
- reporting: printouts, progress bar and system status
"""

from .errors import GenkeysError, AddressInvariantError, KeyDerivationError, SettingsError
from .keys import Seed, KeyPair, derive_keypair, keypair_from_secret, to_hex, from_hex
from .address import addr_for_key, format_address
from .scoring import Candidate, leading_zero_bits, address_zero_blocks
from .channel import ResultChannel
from .settings import Settings
from .worker import Worker, WorkerState
from .coordinator import Coordinator, SearchSnapshot

__all__ = [
    # Errors
    'GenkeysError',
    'AddressInvariantError',
    'KeyDerivationError',
    'SettingsError',

    # Keys
    'Seed',
    'KeyPair',
    'derive_keypair',
    'keypair_from_secret',
    'to_hex',
    'from_hex',

    # Addresses and scoring
    'addr_for_key',
    'format_address',
    'Candidate',
    'leading_zero_bits',
    'address_zero_blocks',

    # Search
    'ResultChannel',
    'Settings',
    'Worker',
    'WorkerState',
    'Coordinator',
    'SearchSnapshot',
]
