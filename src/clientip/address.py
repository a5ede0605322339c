"""Address values and strict textual address parsing.

Addresses taken from forwarding headers are attacker-controlled text, so
the helpers here never raise on bad input: anything that is not a plain
numeric IPv4 or IPv6 literal comes back as None. No name resolution is
ever attempted.
"""

from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass, field


class AddressFamily(enum.Enum):
    """IP address family. The value is the packed width in bytes."""

    IPV4 = 4
    IPV6 = 16

    @property
    def size(self) -> int:
        return self.value


@dataclass(frozen=True)
class AddressValue:
    """An immutable IPv4 or IPv6 address in packed form.

    Equality and hashing are byte-exact: two values compare equal when
    they have the same family and the same packed bytes, regardless of
    the text they were parsed from.

    Attributes:
        family: IPV4 or IPV6.
        packed: Network-order address bytes (4 or 16 of them).
        display: The original textual form, as it appeared in the header.
    """

    family: AddressFamily
    packed: bytes
    display: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if len(self.packed) != self.family.size:
            raise ValueError(
                f"{self.family.name} address must be {self.family.size} bytes, "
                f"got {len(self.packed)}: {self.packed!r}"
            )
        if not self.display:
            object.__setattr__(self, 'display', str(self.ip))

    @classmethod
    def from_ip(
        cls,
        ip: ipaddress.IPv4Address | ipaddress.IPv6Address,
        display: str = "",
    ) -> AddressValue:
        """Build from a stdlib ipaddress object.

        >>> AddressValue.from_ip(ipaddress.ip_address('10.0.0.1')).packed
        b'\\n\\x00\\x00\\x01'
        """
        family = AddressFamily.IPV4 if ip.version == 4 else AddressFamily.IPV6
        return cls(family=family, packed=ip.packed, display=display)

    @classmethod
    def parse(cls, text: str) -> AddressValue:
        """Parse any numeric IPv4 or IPv6 literal.

        Unlike parse_address(), hex-leading IPv6 such as ``fe80::1`` is
        accepted. IPv4-mapped IPv6 collapses to IPv4. Raises ValueError
        for anything else.

        >>> AddressValue.parse('fe80::1').family
        <AddressFamily.IPV6: 16>
        """
        ip = ipaddress.ip_address(text)
        if ip.version == 6 and ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped
        return cls.from_ip(ip, display=text)

    @property
    def ip(self) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
        """The address as a stdlib ipaddress object."""
        if self.family is AddressFamily.IPV4:
            return ipaddress.IPv4Address(self.packed)
        return ipaddress.IPv6Address(self.packed)

    def __str__(self) -> str:
        return str(self.ip)


def parse_address(token: str) -> AddressValue | None:
    """Parse a bare numeric IP address.

    Tokens that do not start with a digit or a colon are rejected up
    front; they are most likely host names or pseudonyms. IPv4-mapped
    IPv6 literals collapse to their IPv4 address.

    >>> str(parse_address('192.0.2.60'))
    '192.0.2.60'
    >>> parse_address('::ffff:10.0.0.1').family
    <AddressFamily.IPV4: 4>
    >>> parse_address('proxy.example.net') is None
    True
    """
    if not token:
        return None
    first = token[0]
    if not (first.isdigit() and first.isascii()) and first != ':':
        return None
    try:
        return AddressValue.parse(token)
    except ValueError:
        return None


def parse_address_maybe_port(token: str) -> AddressValue | None:
    """Parse an address that may carry a port.

    Bracketed IPv6 (``[2001:db8::1]:4711``) is taken up to the closing
    bracket. Otherwise everything from the first colon on is treated as a
    port, so an unbracketed IPv6 literal does not survive this function.

    >>> str(parse_address_maybe_port('[2001:db8:cafe::17]:4711'))
    '2001:db8:cafe::17'
    >>> str(parse_address_maybe_port('8.8.8.8:80'))
    '8.8.8.8'
    """
    if not token:
        return None
    if token[0] == '[':
        close = token.find(']', 1)
        if close == -1:
            return None
        return parse_address(token[1:close])
    colon = token.find(':')
    if colon == -1:
        return parse_address(token)
    return parse_address(token[:colon])
