"""Client IP resolution from forwarding headers.

Two modes exist. When an operator has nominated a header to trust
(CustomHeader), only that header is read: first as an RFC 7239
``Forwarded`` value, then as a plain address list. Otherwise
(FixedPriority) all nine well-known forwarding headers are parsed in
priority order and merged, preferring public addresses. When more than
one of them produced an address, the contributing headers are reported
on the span under MULTIPLE_IP_HEADERS_TAG.

Header values are attacker-controlled. resolve() never raises: any
unexpected failure is logged and treated as "no address".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from clientip.address import AddressValue
from clientip.config import ResolverConfig, normalize_header_name
from clientip.headers import HeaderAccessor, HeaderRole
from clientip.parsers import HeaderSyntax, parse_header
from clientip.ranges import Privacy, classify, is_private

logger = logging.getLogger(__name__)

MULTIPLE_IP_HEADERS_TAG = "_dd.multiple-ip-headers"


class TagSink(Protocol):
    """Span-like object the diagnostic tag is written to."""

    def set_tag(self, key: str, value: str) -> object: ...


@dataclass(frozen=True)
class CustomHeader:
    """Resolve from one operator-nominated header only."""

    name: str


@dataclass(frozen=True)
class FixedPriority:
    """Resolve from the nine fixed forwarding headers."""


ResolutionMode = CustomHeader | FixedPriority


@dataclass(frozen=True)
class HeaderCandidate:
    """Outcome of parsing one header.

    Attributes:
        header: Wire name of the header.
        raw: Header value as received, or None if absent.
        address: Address chosen from this header, if any.
        role: Fixed role, or None for a custom header.
    """

    header: str
    raw: str | None
    address: AddressValue | None
    role: HeaderRole | None = None

    @property
    def privacy(self) -> Privacy | None:
        return classify(self.address) if self.address is not None else None


def prefer_public(
    prev: AddressValue | None, new: AddressValue,
) -> AddressValue:
    """Merge a new header's address into the running result.

    The new address replaces an absent or private running result, even
    when it is private too. A public running result is kept.
    """
    if prev is None or is_private(prev):
        return new
    return prev


def multiple_headers_tag(found: list[HeaderRole]) -> str | None:
    """Build the diagnostic value for headers that yielded an address.

    Short names are listed from the lowest priority header to the
    highest. Returns None when fewer than two headers contributed.

    >>> multiple_headers_tag([HeaderRole.X_FORWARDED_FOR, HeaderRole.X_REAL_IP])
    'x-real-ip,x-forward-for'
    >>> multiple_headers_tag([HeaderRole.VIA]) is None
    True
    """
    contributing = set(found)
    if len(contributing) < 2:
        return None
    ordered = [role for role in reversed(HeaderRole) if role in contributing]
    return ",".join(role.short_name for role in ordered)


class ClientIpResolver:
    """Infers the client IP address of a request from its headers."""

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self.config = config or ResolverConfig()

    def mode_for(self, headers: HeaderAccessor) -> ResolutionMode:
        """Pick the resolution mode for a request.

        A configured header wins; otherwise a custom header name carried
        by the accessor itself selects custom mode.
        """
        name = self.config.client_ip_header
        if name is None:
            name = normalize_header_name(headers.custom_header_name)
        if name is not None:
            return CustomHeader(name)
        return FixedPriority()

    def resolve(
        self,
        headers: HeaderAccessor | None,
        span: TagSink | None = None,
    ) -> AddressValue | None:
        """Infer the client IP address. Never raises.

        Args:
            headers: Forwarding headers of the request.
            span: Optional sink for the multiple-headers diagnostic tag.

        Returns:
            The inferred address, or None if no header yielded one.
        """
        try:
            return self._resolve(headers, span)
        except Exception:
            logger.warning(
                "Unexpected exception (bug) inferring client IP address",
                exc_info=True,
            )
            return None

    def _resolve(
        self,
        headers: HeaderAccessor | None,
        span: TagSink | None,
    ) -> AddressValue | None:
        if headers is None:
            return None

        mode = self.mode_for(headers)
        if isinstance(mode, CustomHeader):
            return self._custom_candidate(headers, mode).address

        result: AddressValue | None = None
        found: list[HeaderRole] = []
        for candidate in self._fixed_candidates(headers):
            if candidate.address is None:
                continue
            found.append(candidate.role)
            result = prefer_public(result, candidate.address)

        tag = multiple_headers_tag(found)
        if tag is not None:
            logger.debug("Client IP found in several headers: %s", tag)
            if span is not None:
                span.set_tag(MULTIPLE_IP_HEADERS_TAG, tag)

        return result

    def candidates(self, headers: HeaderAccessor) -> list[HeaderCandidate]:
        """Per-header parse outcomes for the mode that applies.

        In custom mode this is a single entry; otherwise one entry per
        fixed header, in priority order, present or not.
        """
        mode = self.mode_for(headers)
        if isinstance(mode, CustomHeader):
            return [self._custom_candidate(headers, mode)]
        return self._fixed_candidates(headers)

    def _custom_candidate(
        self, headers: HeaderAccessor, mode: CustomHeader,
    ) -> HeaderCandidate:
        raw = None
        if normalize_header_name(headers.custom_header_name) == mode.name:
            raw = headers.custom_header_value
        else:
            logger.debug(
                "Custom client IP header %r not provided by header accessor",
                mode.name,
            )

        address = parse_header(HeaderSyntax.FORWARDED, raw)
        if address is None:
            address = parse_header(HeaderSyntax.PLAIN, raw)
        return HeaderCandidate(header=mode.name, raw=raw or None, address=address)

    def _fixed_candidates(self, headers: HeaderAccessor) -> list[HeaderCandidate]:
        candidates = []
        for role in HeaderRole:
            raw = headers.get(role) or None
            candidates.append(HeaderCandidate(
                header=role.header_name,
                raw=raw,
                address=parse_header(role.syntax, raw),
                role=role,
            ))
        return candidates


def resolve(
    headers: HeaderAccessor | None,
    span: TagSink | None = None,
    config: ResolverConfig | None = None,
) -> AddressValue | None:
    """Infer the client IP address with a one-off resolver."""
    return ClientIpResolver(config).resolve(headers, span)
