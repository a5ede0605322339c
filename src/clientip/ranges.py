"""Private address range tables and classification.

Each family has its own fixed table of (base, mask) pairs. An address
is private when it matches any range of its own family:

    (addr[i] & mask[i]) == (base[i] & mask[i])  for every byte i

IPv4 ranges: 10.0.0.0/8, 172.16.0.0/12, 192.168.0.0/16, 127.0.0.0/8
and 169.254.0.0/16. IPv6 ranges: ::1/128, fec0::/10, fe80::/10,
fc00::/7 and fd00::/8.
"""

from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass

from clientip.address import AddressFamily, AddressValue


class Privacy(enum.Enum):
    """Result of classifying an address against the private tables."""

    PRIVATE = "private"
    PUBLIC = "public"


@dataclass(frozen=True)
class PrivateRange:
    """A single non-globally-routable block.

    Attributes:
        family: Address family the range applies to.
        base: Packed base address of the block.
        mask: Packed netmask, same width as base.
        label: CIDR notation, for display only.
    """

    family: AddressFamily
    base: bytes
    mask: bytes
    label: str = ""

    def __post_init__(self) -> None:
        size = self.family.size
        if len(self.base) != size or len(self.mask) != size:
            raise ValueError(
                f"{self.family.name} range needs {size}-byte base and mask: "
                f"{self.label or self.base!r}"
            )

    @classmethod
    def from_cidr(cls, cidr: str) -> PrivateRange:
        """Build a range from CIDR notation.

        >>> PrivateRange.from_cidr('172.16.0.0/12').mask
        b'\\xff\\xf0\\x00\\x00'
        """
        network = ipaddress.ip_network(cidr)
        family = AddressFamily.IPV4 if network.version == 4 else AddressFamily.IPV6
        return cls(
            family=family,
            base=network.network_address.packed,
            mask=network.netmask.packed,
            label=cidr,
        )

    def contains(self, addr: AddressValue) -> bool:
        if addr.family is not self.family:
            return False
        return all(
            (a & m) == (b & m)
            for a, b, m in zip(addr.packed, self.base, self.mask)
        )


PRIVATE_IPV4_RANGES: tuple[PrivateRange, ...] = tuple(
    PrivateRange.from_cidr(cidr) for cidr in (
        '10.0.0.0/8',
        '172.16.0.0/12',
        '192.168.0.0/16',
        '127.0.0.0/8',
        '169.254.0.0/16',
    )
)

PRIVATE_IPV6_RANGES: tuple[PrivateRange, ...] = tuple(
    PrivateRange.from_cidr(cidr) for cidr in (
        '::1/128',
        'fec0::/10',  # deprecated site-local
        'fe80::/10',
        'fc00::/7',
        'fd00::/8',
    )
)

_RANGES_BY_FAMILY = {
    AddressFamily.IPV4: PRIVATE_IPV4_RANGES,
    AddressFamily.IPV6: PRIVATE_IPV6_RANGES,
}


def ranges_for(family: AddressFamily) -> tuple[PrivateRange, ...]:
    """Return the private range table for an address family."""
    return _RANGES_BY_FAMILY[family]


def is_private(addr: AddressValue) -> bool:
    """Check whether an address falls in any private range of its family.

    >>> from clientip.address import parse_address
    >>> is_private(parse_address('169.254.1.1'))
    True
    >>> is_private(parse_address('2001:4860:4860::8888'))
    False
    """
    return any(r.contains(addr) for r in ranges_for(addr.family))


def classify(addr: AddressValue) -> Privacy:
    """Classify an address as PRIVATE or PUBLIC."""
    return Privacy.PRIVATE if is_private(addr) else Privacy.PUBLIC
