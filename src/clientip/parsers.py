"""Forwarding header value parsers.

Three header syntaxes are understood:

- PLAIN: a comma-separated list of bare addresses (X-Forwarded-For,
  X-Real-IP and friends).
- FORWARDED: RFC 7239 structured parameters; only ``for=`` values are
  used.
- VIA: RFC 7230 ``Via`` hops of the form ``1.1 host[:port] [comment]``.

Every parser applies the same policy: the first public address wins
and ends the scan; if none is public, the first private address seen
is returned. Malformed entries are skipped. Parsers return None rather
than raising on bad input.
"""

from __future__ import annotations

import enum
import re
from typing import Callable

from clientip.address import AddressValue, parse_address, parse_address_maybe_port
from clientip.ranges import is_private

# Characters that end a Forwarded token or separate parameters/elements.
_FORWARDED_DELIMITERS = frozenset(' ;,')

_QUOTED_PAIR_RE = re.compile(r'\\(.)', re.DOTALL)

# protocol/version, whitespace, then the received-by host[:port]
_VIA_HOP_RE = re.compile(r'[ \t]*[^ \t]+[ \t]+([^ \t]+)')


class HeaderSyntax(enum.Enum):
    """Wire syntax of a forwarding header."""

    PLAIN = "plain"
    FORWARDED = "forwarded"
    VIA = "via"


class ForwardedState(enum.Enum):
    """States of the RFC 7239 tokenizer."""

    BETWEEN = enum.auto()
    KEY = enum.auto()
    BEFORE_VALUE = enum.auto()
    VALUE_TOKEN = enum.auto()
    VALUE_QUOTED = enum.auto()


class _Selection:
    """Tracks the public-wins / first-private-fallback choice."""

    __slots__ = ('public', 'first_private')

    def __init__(self) -> None:
        self.public: AddressValue | None = None
        self.first_private: AddressValue | None = None

    def offer(self, addr: AddressValue | None) -> bool:
        """Record a candidate. Returns True once a public address is held."""
        if addr is None:
            return False
        if is_private(addr):
            if self.first_private is None:
                self.first_private = addr
            return False
        self.public = addr
        return True

    @property
    def result(self) -> AddressValue | None:
        return self.public if self.public is not None else self.first_private


def parse_plain_list(value: str) -> AddressValue | None:
    """Parse a comma-separated list of bare addresses.

    Leading spaces of each entry are skipped. Ports are not stripped, so
    ``1.2.3.4:80`` is not a valid entry in this syntax.

    >>> str(parse_plain_list('10.0.0.1, 8.8.8.8'))
    '8.8.8.8'
    >>> str(parse_plain_list('10.0.0.1, 10.0.0.2'))
    '10.0.0.1'
    """
    selection = _Selection()
    for entry in value.split(','):
        if selection.offer(parse_address(entry.lstrip(' '))):
            break
    return selection.result


def _unquote(quoted: str) -> str:
    return _QUOTED_PAIR_RE.sub(r'\1', quoted)


def parse_forwarded(value: str) -> AddressValue | None:
    """Parse an RFC 7239 ``Forwarded`` header value.

    The value is scanned one character at a time. Keys other than
    ``for`` (case-insensitive) are tokenized so their values, quoted or
    not, are skipped correctly, then discarded.

    >>> str(parse_forwarded('for=192.0.2.60;proto=http;by=203.0.113.43'))
    '192.0.2.60'
    >>> str(parse_forwarded('for="[2001:db8:cafe::17]:4711"'))
    '2001:db8:cafe::17'
    """
    selection = _Selection()
    state = ForwardedState.BETWEEN
    start = 0
    wanted = False
    pos = 0
    end = len(value)

    while pos < end:
        c = value[pos]
        candidate: str | None = None

        if state is ForwardedState.BETWEEN:
            if c not in _FORWARDED_DELIMITERS:
                start = pos
                state = ForwardedState.KEY
        elif state is ForwardedState.KEY:
            if c == '=':
                wanted = pos - start == 3 and value[start:pos].lower() == 'for'
                state = ForwardedState.BEFORE_VALUE
        elif state is ForwardedState.BEFORE_VALUE:
            if c == '"':
                start = pos + 1
                state = ForwardedState.VALUE_QUOTED
            elif c in _FORWARDED_DELIMITERS:
                # empty value
                state = ForwardedState.BETWEEN
            else:
                start = pos
                state = ForwardedState.VALUE_TOKEN
        elif state is ForwardedState.VALUE_TOKEN:
            if c in _FORWARDED_DELIMITERS:
                if wanted:
                    candidate = value[start:pos]
                state = ForwardedState.BETWEEN
        elif state is ForwardedState.VALUE_QUOTED:
            if c == '"':
                if wanted:
                    candidate = _unquote(value[start:pos])
                state = ForwardedState.BETWEEN
            elif c == '\\':
                pos += 1

        if candidate is not None:
            if selection.offer(parse_address_maybe_port(candidate)):
                return selection.public
        pos += 1

    # A token value may run to the end of the header. An unterminated
    # quoted value is dropped.
    if state is ForwardedState.VALUE_TOKEN and wanted:
        selection.offer(parse_address_maybe_port(value[start:end]))

    return selection.result


def parse_via(value: str) -> AddressValue | None:
    """Parse an RFC 7230 ``Via`` header value.

    Each hop is ``protocol/version received-by [comment]``; only the
    received-by part is considered, and host names never match.

    >>> str(parse_via('1.1 8.8.8.8:80'))
    '8.8.8.8'
    >>> parse_via('1.0 fred, 1.1 p.example.net') is None
    True
    """
    selection = _Selection()
    for hop in value.split(','):
        m = _VIA_HOP_RE.match(hop)
        if m is None:
            continue
        if selection.offer(parse_address_maybe_port(m.group(1))):
            break
    return selection.result


PARSERS: dict[HeaderSyntax, Callable[[str], AddressValue | None]] = {
    HeaderSyntax.PLAIN: parse_plain_list,
    HeaderSyntax.FORWARDED: parse_forwarded,
    HeaderSyntax.VIA: parse_via,
}


def parse_header(syntax: HeaderSyntax, value: str | None) -> AddressValue | None:
    """Parse a header value with the parser for its syntax.

    Absent and empty values yield None without invoking the parser.
    """
    if not value:
        return None
    return PARSERS[syntax](value)
