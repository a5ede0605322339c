"""Forwarding header roles and the header set consumed by the resolver.

The resolver never looks headers up by wire name itself. It asks a
header accessor for the value of a fixed role; HeaderSet is the stock
accessor, built from whatever header mapping the caller already has.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Protocol

from clientip.parsers import HeaderSyntax


class HeaderRole(enum.Enum):
    """The nine fixed forwarding headers, in resolution priority order.

    Each member carries the wire header name, the short name reported in
    the multiple-headers diagnostic, and the syntax of its value.
    """

    X_FORWARDED_FOR = ("X-Forwarded-For", "x-forward-for", HeaderSyntax.PLAIN)
    X_REAL_IP = ("X-Real-IP", "x-real-ip", HeaderSyntax.PLAIN)
    CLIENT_IP = ("Client-IP", "client-ip", HeaderSyntax.PLAIN)
    X_FORWARDED = ("X-Forwarded", "x-forwarded", HeaderSyntax.FORWARDED)
    X_CLUSTER_CLIENT_IP = (
        "X-Cluster-Client-IP", "x-cluster-client-ip", HeaderSyntax.PLAIN,
    )
    FORWARDED_FOR = ("Forwarded-For", "forwarded-for", HeaderSyntax.PLAIN)
    FORWARDED = ("Forwarded", "forwarded", HeaderSyntax.FORWARDED)
    VIA = ("Via", "via", HeaderSyntax.VIA)
    TRUE_CLIENT_IP = ("True-Client-IP", "true-client-ip", HeaderSyntax.PLAIN)

    def __init__(self, header_name: str, short_name: str, syntax: HeaderSyntax) -> None:
        self.header_name = header_name
        self.short_name = short_name
        self.syntax = syntax

    @property
    def field_name(self) -> str:
        """Attribute name of this role on HeaderSet."""
        return self.name.lower()

    @classmethod
    def from_header_name(cls, name: str) -> HeaderRole | None:
        """Look up a role by wire header name, case-insensitively.

        >>> HeaderRole.from_header_name('x-forwarded-for').name
        'X_FORWARDED_FOR'
        >>> HeaderRole.from_header_name('Host') is None
        True
        """
        return _ROLES_BY_WIRE_NAME.get(name.strip().lower())


_ROLES_BY_WIRE_NAME = {role.header_name.lower(): role for role in HeaderRole}


class HeaderAccessor(Protocol):
    """Read-only view of the forwarding headers of one request.

    Calls must be idempotent and free of side effects. Absent and empty
    values are equivalent.
    """

    @property
    def custom_header_name(self) -> str | None: ...

    @property
    def custom_header_value(self) -> str | None: ...

    def get(self, role: HeaderRole) -> str | None: ...


@dataclass(frozen=True)
class HeaderSet:
    """Forwarding header values extracted from one request.

    Empty strings are stored as None. The custom header pair is only
    populated when an operator has nominated a header to trust.
    """

    x_forwarded_for: str | None = None
    x_real_ip: str | None = None
    client_ip: str | None = None
    x_forwarded: str | None = None
    x_cluster_client_ip: str | None = None
    forwarded_for: str | None = None
    forwarded: str | None = None
    via: str | None = None
    true_client_ip: str | None = None
    custom_header_name: str | None = None
    custom_header_value: str | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) == "":
                object.__setattr__(self, f.name, None)

    def get(self, role: HeaderRole) -> str | None:
        return getattr(self, role.field_name)

    def present(self) -> list[HeaderRole]:
        """Roles with a value, in priority order."""
        return [role for role in HeaderRole if self.get(role) is not None]

    @classmethod
    def from_mapping(
        cls,
        headers: Mapping[str, str] | Iterable[tuple[str, str]],
        custom_header: str | None = None,
    ) -> HeaderSet:
        """Build from request headers keyed by wire name.

        Accepts a mapping or an iterable of (name, value) pairs. Names are
        matched case-insensitively; a header that appears more than once
        is joined with ", " in arrival order, as RFC 7230 permits for
        list-valued headers.

        >>> hs = HeaderSet.from_mapping([('X-Forwarded-For', '10.0.0.1'),
        ...                              ('x-forwarded-for', '8.8.8.8')])
        >>> hs.x_forwarded_for
        '10.0.0.1, 8.8.8.8'
        """
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        custom = custom_header.strip().lower() if custom_header else None

        by_role: dict[HeaderRole, list[str]] = {}
        custom_values: list[str] = []
        for name, value in pairs:
            if not value:
                continue
            if custom is not None and name.strip().lower() == custom:
                custom_values.append(value)
            role = HeaderRole.from_header_name(name)
            if role is not None:
                by_role.setdefault(role, []).append(value)

        kwargs = {role.field_name: ", ".join(values) for role, values in by_role.items()}
        if custom is not None:
            kwargs["custom_header_name"] = custom
            kwargs["custom_header_value"] = ", ".join(custom_values)
        return cls(**kwargs)

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        custom_header: str | None = None,
    ) -> HeaderSet:
        """Build from raw ``Name: value`` header lines.

        Blank lines and lines that are not header fields (a request or
        status line, for instance) are ignored.
        """
        pairs = []
        for line in lines:
            name, sep, value = line.partition(':')
            name = name.strip()
            if not sep or not name or any(ch.isspace() for ch in name):
                continue
            pairs.append((name, value.strip(' \t\r\n')))
        return cls.from_mapping(pairs, custom_header=custom_header)
