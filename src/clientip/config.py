"""Load resolver configuration from clientip.toml.

The only setting is the name of a single header to trust exclusively.
It can be given in the ``[resolver]`` table of the config file:

    [resolver]
    client_ip_header = "X-Client-Address"

and overridden with the CLIENTIP_CLIENT_IP_HEADER environment variable.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_PATH = Path("clientip.toml")
ENV_CLIENT_IP_HEADER = "CLIENTIP_CLIENT_IP_HEADER"


def normalize_header_name(name: str | None) -> str | None:
    """Lower-case and strip a header name; blank names become None.

    >>> normalize_header_name('  X-Client-Address ')
    'x-client-address'
    >>> normalize_header_name('   ') is None
    True
    """
    if name is None:
        return None
    name = name.strip().lower()
    return name or None


@dataclass(frozen=True)
class ResolverConfig:
    """Client IP resolver configuration.

    Attributes:
        client_ip_header: Header to trust exclusively, or None to walk the
            fixed forwarding headers.
    """

    client_ip_header: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, 'client_ip_header', normalize_header_name(self.client_ip_header),
        )


def _build_resolver(data: dict) -> ResolverConfig:
    """Build the resolver config from parsed TOML data."""
    section = data.get("resolver", {})
    if not isinstance(section, dict):
        raise ValueError(f"resolver must be a table, got {section!r}")
    header = section.get("client_ip_header")
    if header is not None and not isinstance(header, str):
        raise ValueError(
            f"resolver.client_ip_header must be a string, got {header!r}"
        )
    return ResolverConfig(client_ip_header=header)


def load_config(
    config_path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> ResolverConfig:
    """Load resolver configuration from a TOML file and the environment.

    If config_path is None, looks for clientip.toml in the current
    directory and falls back to defaults when it does not exist. An
    explicit path that does not exist raises FileNotFoundError.
    """
    if config_path is None:
        path = DEFAULT_CONFIG_PATH
        data: dict = {}
        if path.exists():
            with open(path, "rb") as f:
                data = tomllib.load(f)
    else:
        with open(Path(config_path), "rb") as f:
            data = tomllib.load(f)

    config = _build_resolver(data)

    env = os.environ if environ is None else environ
    override = normalize_header_name(env.get(ENV_CLIENT_IP_HEADER))
    if override is not None:
        config = ResolverConfig(client_ip_header=override)

    return config
