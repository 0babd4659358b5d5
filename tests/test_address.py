import pytest

from genkeys.address import ADDRESS_SIZE, MAX_ONES, addr_for_key, address_groups, format_address
from genkeys.errors import AddressInvariantError
from genkeys.keys import Seed, derive_keypair


def test_address_layout():
    public_key = bytes.fromhex("c14f47307e7b1a45df5ba772fe1f36249996df3cd346e192f0e9eff49fa4c506")
    addr = addr_for_key(public_key)

    assert len(addr) == ADDRESS_SIZE
    assert addr[0] == 0x02
    assert addr[1] == 0  # 0xc1 starts with a one bit, so no leading zeros
    assert addr.hex() == "02007d61719f0309cb744148b11a03c1"


def test_all_ones_key_gives_zero_tail():
    addr = addr_for_key(b"\xff" * 32)
    assert addr == bytes([0x02]) + bytes(15)
    assert format_address(addr) == "200:0:0:0:0:0:0:0"


def test_ones_count_matches_leading_zero_bits():
    # 3 zero bytes, then 0b00010000: 27 leading zero bits
    public_key = bytes(3) + bytes([0x10]) + b"\xaa" * 28
    addr = addr_for_key(public_key)
    assert addr[1] == 27


def test_tail_starts_after_first_zero_bit():
    # inverted: 0b10xxxxxx... -> one leading one, tail starts at bit 2
    public_key = bytes([0x7f]) + bytes(31)
    addr = addr_for_key(public_key)
    assert addr[1] == 1
    # remaining inverted bits: 000000 followed by all ones
    assert addr[2] == 0b00000011
    assert addr[3:] == b"\xff" * 13


def test_max_ones_is_accepted():
    public_key = bytes(15) + bytes([0x01]) + b"\x55" * 16
    addr = addr_for_key(public_key)
    assert addr[1] == MAX_ONES


@pytest.mark.parametrize("public_key", [
    bytes(16) + bytes([0x80]) + bytes(15),
    bytes(32),
])
def test_too_many_ones_raises(public_key):
    with pytest.raises(AddressInvariantError):
        addr_for_key(public_key)


def test_invariant_error_is_an_assertion():
    with pytest.raises(AssertionError):
        addr_for_key(bytes(32))


def test_wrong_key_length():
    with pytest.raises(ValueError):
        addr_for_key(b"\x01" * 31)


def test_derivation_is_deterministic():
    for _ in range(20):
        keys = derive_keypair(Seed.random())
        first = addr_for_key(keys.public_key)
        assert addr_for_key(bytes(keys.public_key)) == first
        assert first[0] == 0x02


def test_format_address_drops_leading_zeros_without_compression():
    addr = bytes.fromhex("0205d2280734" "00d2" "0000" "0000" "dc2f" "0f3d")
    assert format_address(addr) == "205:d228:734:d2:0:0:dc2f:f3d"


def test_address_groups():
    addr = bytes.fromhex("0200" "7d61" "719f" "0309" "cb74" "4148" "b11a" "03c1")
    assert address_groups(addr) == [0x200, 0x7d61, 0x719f, 0x309, 0xcb74, 0x4148, 0xb11a, 0x3c1]


def test_format_address_wrong_length():
    with pytest.raises(ValueError):
        format_address(bytes(15))
