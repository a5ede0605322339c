"""CLI entry point for clientip.

Subcommands:
    resolve    Infer the client IP from a set of request headers.
    classify   Classify addresses as private or public.
    info       Show effective configuration and private range tables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _load_config(args: argparse.Namespace):
    """Load resolver config, handling errors."""
    from clientip.config import load_config

    config_path = getattr(args, "config", None)
    try:
        return load_config(config_path)
    except FileNotFoundError:
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: invalid config: {e}", file=sys.stderr)
        sys.exit(1)


class _TagCollector:
    """Records tags set by the resolver."""

    def __init__(self) -> None:
        self.tags: dict[str, str] = {}

    def set_tag(self, key: str, value: str) -> None:
        self.tags[key] = value


def _read_header_lines(args: argparse.Namespace) -> list[str]:
    """Collect raw header lines from --file and -H options."""
    lines: list[str] = []
    if args.file == "-":
        lines.extend(sys.stdin.read().splitlines())
    elif args.file:
        lines.extend(Path(args.file).read_text().splitlines())
    lines.extend(args.header_lines or [])
    return lines


# ---------------------------------------------------------------------------
# Subcommand: resolve
# ---------------------------------------------------------------------------

def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve the client IP from header lines."""
    from clientip.config import ResolverConfig
    from clientip.headers import HeaderSet
    from clientip.report import render_report
    from clientip.resolver import MULTIPLE_IP_HEADERS_TAG, ClientIpResolver

    config = _load_config(args)
    if args.trust_header:
        config = ResolverConfig(client_ip_header=args.trust_header)

    try:
        lines = _read_header_lines(args)
    except OSError as e:
        print(f"Error: cannot read headers: {e}", file=sys.stderr)
        return 1

    headers = HeaderSet.from_lines(lines, custom_header=config.client_ip_header)
    resolver = ClientIpResolver(config)
    span = _TagCollector()
    result = resolver.resolve(headers, span)
    tag = span.tags.get(MULTIPLE_IP_HEADERS_TAG)

    if args.report:
        report = render_report(
            resolver.candidates(headers), result, tag, present=headers.present(),
        )
        print(report, end="")
    else:
        print(result if result is not None else "none")
        if tag:
            print(f"{MULTIPLE_IP_HEADERS_TAG}: {tag}")

    return 0 if result is not None else 1


# ---------------------------------------------------------------------------
# Subcommand: classify
# ---------------------------------------------------------------------------

def cmd_classify(args: argparse.Namespace) -> int:
    """Classify each address argument."""
    from clientip.address import AddressValue
    from clientip.ranges import classify

    status = 0
    for text in args.addresses:
        try:
            addr = AddressValue.parse(text)
        except ValueError:
            print(f"{text} invalid")
            status = 1
            continue
        print(f"{text} {classify(addr).value}")
    return status


# ---------------------------------------------------------------------------
# Subcommand: info
# ---------------------------------------------------------------------------

def cmd_info(args: argparse.Namespace) -> int:
    """Show effective configuration."""
    from clientip.headers import HeaderRole
    from clientip.ranges import PRIVATE_IPV4_RANGES, PRIVATE_IPV6_RANGES

    config = _load_config(args)

    if config.client_ip_header:
        print(f"Trusted header: {config.client_ip_header}")
    else:
        print("Trusted header: (none, using fixed header priority)")
        print()
        print("Header priority:")
        for i, role in enumerate(HeaderRole, 1):
            print(f"  {i}. {role.header_name} ({role.syntax.value})")
    print()

    print("Private IPv4 ranges:")
    for r in PRIVATE_IPV4_RANGES:
        print(f"  {r.label}")
    print()

    print("Private IPv6 ranges:")
    for r in PRIVATE_IPV6_RANGES:
        print(f"  {r.label}")

    return 0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="clientip",
        description="Infer the client IP address of a request from forwarding headers.",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to clientip.toml (default: ./clientip.toml if present)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # resolve
    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve the client IP from request headers",
    )
    resolve_parser.add_argument(
        "-H", dest="header_lines", action="append", metavar="'NAME: VALUE'",
        help="Request header (repeatable)",
    )
    resolve_parser.add_argument(
        "-f", "--file",
        help="Read raw header lines from a file ('-' for stdin)",
    )
    resolve_parser.add_argument(
        "--trust-header", metavar="NAME",
        help="Trust only this header (overrides config)",
    )
    resolve_parser.add_argument(
        "--report", action="store_true",
        help="Show a per-header breakdown",
    )

    # classify
    classify_parser = subparsers.add_parser(
        "classify", help="Classify addresses as private or public",
    )
    classify_parser.add_argument("addresses", nargs="+", help="IP addresses")

    # info
    subparsers.add_parser("info", help="Show resolver configuration")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "resolve": cmd_resolve,
        "classify": cmd_classify,
        "info": cmd_info,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
