"""Tests for private range classification."""

import pytest

from clientip.address import AddressFamily, AddressValue, parse_address
from clientip.ranges import (
    PRIVATE_IPV4_RANGES,
    PRIVATE_IPV6_RANGES,
    Privacy,
    PrivateRange,
    classify,
    is_private,
    ranges_for,
)


class TestPrivateRange:
    def test_from_cidr(self):
        r = PrivateRange.from_cidr("172.16.0.0/12")
        assert r.family is AddressFamily.IPV4
        assert r.base == b"\xac\x10\x00\x00"
        assert r.mask == b"\xff\xf0\x00\x00"
        assert r.label == "172.16.0.0/12"

    def test_contains(self):
        r = PrivateRange.from_cidr("172.16.0.0/12")
        assert r.contains(parse_address("172.31.255.255"))
        assert not r.contains(parse_address("172.32.0.0"))

    def test_other_family_never_contained(self):
        r = PrivateRange.from_cidr("0.0.0.0/0")
        assert not r.contains(parse_address("::1"))

    def test_width_validated(self):
        with pytest.raises(ValueError, match="4-byte"):
            PrivateRange(AddressFamily.IPV4, b"\x0a", b"\xff")


class TestTables:
    def test_ipv4_table(self):
        assert [r.label for r in PRIVATE_IPV4_RANGES] == [
            "10.0.0.0/8",
            "172.16.0.0/12",
            "192.168.0.0/16",
            "127.0.0.0/8",
            "169.254.0.0/16",
        ]

    def test_ipv6_table(self):
        assert [r.label for r in PRIVATE_IPV6_RANGES] == [
            "::1/128",
            "fec0::/10",
            "fe80::/10",
            "fc00::/7",
            "fd00::/8",
        ]

    def test_ranges_for(self):
        assert ranges_for(AddressFamily.IPV4) is PRIVATE_IPV4_RANGES
        assert ranges_for(AddressFamily.IPV6) is PRIVATE_IPV6_RANGES

    def test_every_ipv6_range_is_checked(self):
        """Each IPv6 range classifies its own base address as private,
        not just the first entry of the table."""
        for r in PRIVATE_IPV6_RANGES:
            base = AddressValue(r.family, r.base)
            assert is_private(base), r.label


class TestClassify:
    @pytest.mark.parametrize("text", [
        "10.1.2.3",
        "10.255.255.255",
        "172.16.0.1",
        "172.31.255.255",
        "192.168.0.1",
        "127.0.0.1",
        "169.254.1.1",
        "::1",
        "fe80::1",
        "febf::1",
        "fec0::1",
        "fc00::1",
        "fd12:3456::1",
        "::ffff:192.168.1.1",
    ])
    def test_private(self, text):
        addr = AddressValue.parse(text)
        assert classify(addr) is Privacy.PRIVATE
        assert is_private(addr)

    @pytest.mark.parametrize("text", [
        "8.8.8.8",
        "1.1.1.1",
        "11.0.0.1",
        "172.15.255.255",
        "172.32.0.0",
        "192.0.2.60",
        "2001:4860:4860::8888",
        "::2",
        "fe00::1",
        "ff02::1",
    ])
    def test_public(self, text):
        addr = AddressValue.parse(text)
        assert classify(addr) is Privacy.PUBLIC
        assert not is_private(addr)

    def test_zone_indexed_ipv6_classified_by_address(self):
        """The zone index is dropped; only the address bytes are classified."""
        assert classify(parse_address("2001:db8::1%eth0")) is Privacy.PUBLIC
        assert classify(parse_address("::1%lo")) is Privacy.PRIVATE
