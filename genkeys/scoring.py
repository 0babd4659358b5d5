"""
Candidate scoring and comparison.

Two scores are tracked for every generated key:
- zero_bits: leading zero bits of the public key (more = "higher" address)
- zero_blocks: longest run of all-zero 16-bit groups in the address,
  ignoring group 0 which holds the prefix and the ones count
"""

from dataclasses import dataclass
from typing import Optional

from .address import ADDRESS_SIZE, addr_for_key, address_groups, format_address
from .keys import KeyPair


def leading_zero_bits(public_key: bytes) -> int:
    """Count leading zero bits, stopping at the first non-zero byte."""
    count = 0
    for byte in public_key:
        if byte:
            # 8 - bit_length == leading zeros inside this byte
            return count + 8 - byte.bit_length()
        count += 8
    return count


def address_zero_blocks(addr: bytes) -> int:
    """Longest run of consecutive all-zero groups among groups 1..7."""
    if len(addr) != ADDRESS_SIZE:
        raise ValueError(f"Address must be {ADDRESS_SIZE} bytes, got {len(addr)}")

    longest = 0
    run = 0
    for group in address_groups(addr)[1:]:
        if group == 0:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


@dataclass(frozen=True)
class Candidate:
    """A generated keypair with its address and scores."""
    keys: KeyPair
    address: bytes
    zero_bits: int
    zero_blocks: int

    @classmethod
    def from_keys(cls, keys: KeyPair) -> 'Candidate':
        address = addr_for_key(keys.public_key)
        return cls(
            keys=keys,
            address=address,
            zero_bits=leading_zero_bits(keys.public_key),
            zero_blocks=address_zero_blocks(address),
        )

    @property
    def address_str(self) -> str:
        return format_address(self.address)

    def is_better(self, other: Optional['Candidate'], ipv6_nice: bool) -> bool:
        """Return True if this candidate strictly beats `other`.

        With ipv6_nice the zero block run decides and zero bits break ties;
        otherwise only zero bits count. Equal candidates never win. Anything
        beats a missing candidate.
        """
        if other is None:
            return True
        if ipv6_nice:
            if self.zero_blocks != other.zero_blocks:
                return self.zero_blocks > other.zero_blocks
            return self.zero_bits > other.zero_bits
        return self.zero_bits > other.zero_bits
