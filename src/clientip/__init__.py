"""clientip: infer the real client IP address from forwarding headers.

Quick start:
    from clientip import HeaderSet, resolve

    headers = HeaderSet.from_mapping(request.headers)
    addr = resolve(headers, span)
    if addr is not None:
        print(addr, addr.family.name)
"""

from clientip.address import (
    AddressFamily,
    AddressValue,
    parse_address,
    parse_address_maybe_port,
)
from clientip.config import ResolverConfig, load_config
from clientip.headers import HeaderAccessor, HeaderRole, HeaderSet
from clientip.parsers import (
    HeaderSyntax,
    parse_forwarded,
    parse_plain_list,
    parse_via,
)
from clientip.ranges import Privacy, classify, is_private
from clientip.resolver import (
    MULTIPLE_IP_HEADERS_TAG,
    ClientIpResolver,
    CustomHeader,
    FixedPriority,
    HeaderCandidate,
    TagSink,
    resolve,
)

__version__ = "0.1.0"

__all__ = [
    "AddressFamily",
    "AddressValue",
    "ClientIpResolver",
    "CustomHeader",
    "FixedPriority",
    "HeaderAccessor",
    "HeaderCandidate",
    "HeaderRole",
    "HeaderSet",
    "HeaderSyntax",
    "MULTIPLE_IP_HEADERS_TAG",
    "Privacy",
    "ResolverConfig",
    "TagSink",
    "classify",
    "is_private",
    "load_config",
    "parse_address",
    "parse_address_maybe_port",
    "parse_forwarded",
    "parse_plain_list",
    "parse_via",
    "resolve",
]
