"""
Yggdrasil address derivation.

The address for a public key is built from the bit-inverted key:
1. Invert every bit of the 256-bit public key (MSB first)
2. Count the leading 1-bits up to the first 0-bit ("ones")
3. Pack every bit AFTER that 0-bit into bytes, MSB first
4. Address = [0x02][ones][first 14 packed bytes]

So each leading zero bit in the public key pushes the address one step further
into the 0200::/7 range, and the rest of the key fills the remaining 112 bits.
"""

from .errors import AddressInvariantError
from .keys import PUBLIC_KEY_SIZE

ADDRESS_SIZE = 16
ADDRESS_PREFIX = bytes([0x02])
MAX_ONES = 127

_KEY_BITS = PUBLIC_KEY_SIZE * 8
_KEY_MASK = (1 << _KEY_BITS) - 1
_TAIL_SIZE = ADDRESS_SIZE - len(ADDRESS_PREFIX) - 1  # 14


def addr_for_key(public_key: bytes) -> bytes:
    """Derive the 16-byte address for a 32-byte public key.

    Raises:
        ValueError: if the key is not 32 bytes
        AddressInvariantError: if the inverted key starts with more than 127 one-bits
    """
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise ValueError(f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}")

    inverted = int.from_bytes(public_key, 'big') ^ _KEY_MASK

    # Leading ones of the inverted key == leading zeros of the key itself
    ones = _KEY_BITS - (inverted ^ _KEY_MASK).bit_length()
    if ones > MAX_ONES:
        raise AddressInvariantError(f"ones count {ones} exceeds {MAX_ONES}")

    # Skip the ones and the terminating zero bit; an incomplete trailing byte is dropped
    tail_bits = _KEY_BITS - ones - 1
    tail_bytes = tail_bits // 8
    tail = ((inverted & ((1 << tail_bits) - 1)) >> (tail_bits % 8)).to_bytes(tail_bytes, 'big')

    addr = bytearray(ADDRESS_SIZE)
    addr[0:len(ADDRESS_PREFIX)] = ADDRESS_PREFIX
    addr[len(ADDRESS_PREFIX)] = ones
    tail = tail[:_TAIL_SIZE]
    start = len(ADDRESS_PREFIX) + 1
    addr[start:start + len(tail)] = tail
    return bytes(addr)


def address_groups(addr: bytes):
    """Split an address into its eight big-endian 16-bit groups."""
    return [(addr[i] << 8) | addr[i + 1] for i in range(0, ADDRESS_SIZE, 2)]


def format_address(addr: bytes) -> str:
    """Format as eight colon-separated hex groups.

    Leading zeros inside a group are dropped but zero groups are never
    compressed to '::', e.g. "200:7d61:719f:309:cb74:4148:b11a:3c1".
    """
    if len(addr) != ADDRESS_SIZE:
        raise ValueError(f"Address must be {ADDRESS_SIZE} bytes, got {len(addr)}")
    return ":".join(f"{group:x}" for group in address_groups(addr))
