"""Tests for resolver configuration loading."""

import textwrap

import pytest

from clientip.config import (
    ENV_CLIENT_IP_HEADER,
    ResolverConfig,
    load_config,
    normalize_header_name,
)


class TestNormalizeHeaderName:
    def test_lowercases_and_strips(self):
        assert normalize_header_name("  X-Client-Address ") == "x-client-address"

    def test_blank(self):
        assert normalize_header_name("") is None
        assert normalize_header_name("   ") is None
        assert normalize_header_name(None) is None


class TestResolverConfig:
    def test_default(self):
        assert ResolverConfig().client_ip_header is None

    def test_normalised(self):
        assert ResolverConfig(client_ip_header="True-Client-IP").client_ip_header == "true-client-ip"


class TestLoadConfig:
    def test_defaults_without_file(self, clean_env):
        assert load_config() == ResolverConfig()

    def test_reads_default_file(self, clean_env):
        (clean_env / "clientip.toml").write_text(textwrap.dedent("""\
            [resolver]
            client_ip_header = "X-Client-Address"
        """))
        assert load_config().client_ip_header == "x-client-address"

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('[resolver]\nclient_ip_header = "CF-Connecting-IP"\n')
        config = load_config(path, environ={})
        assert config.client_ip_header == "cf-connecting-ip"

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml", environ={})

    def test_empty_section(self, tmp_path):
        path = tmp_path / "clientip.toml"
        path.write_text("[resolver]\n")
        assert load_config(path, environ={}).client_ip_header is None

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "clientip.toml"
        path.write_text("[resolver]\nclient_ip_header = 42\n")
        with pytest.raises(ValueError, match="client_ip_header"):
            load_config(path, environ={})

    def test_environment_override(self, tmp_path):
        path = tmp_path / "clientip.toml"
        path.write_text('[resolver]\nclient_ip_header = "X-Client-Address"\n')
        config = load_config(path, environ={ENV_CLIENT_IP_HEADER: "True-Client-IP"})
        assert config.client_ip_header == "true-client-ip"

    def test_blank_environment_ignored(self, tmp_path):
        path = tmp_path / "clientip.toml"
        path.write_text('[resolver]\nclient_ip_header = "X-Client-Address"\n')
        config = load_config(path, environ={ENV_CLIENT_IP_HEADER: "  "})
        assert config.client_ip_header == "x-client-address"

    def test_process_environment_used_by_default(self, clean_env, monkeypatch):
        monkeypatch.setenv(ENV_CLIENT_IP_HEADER, "X-Real-Client")
        assert load_config().client_ip_header == "x-real-client"

    def test_resolver_not_a_table(self, tmp_path):
        path = tmp_path / "clientip.toml"
        path.write_text('resolver = "x"\n')
        with pytest.raises(ValueError, match="resolver must be a table"):
            load_config(path, environ={})
