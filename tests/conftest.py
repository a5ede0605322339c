"""Shared test fixtures for clientip."""

import pytest

from clientip.config import ENV_CLIENT_IP_HEADER


class RecordingSpan:
    """Minimal tag sink that remembers every tag set on it."""

    def __init__(self):
        self.tags = {}
        self.calls = 0

    def set_tag(self, key, value):
        self.calls += 1
        self.tags[key] = value


@pytest.fixture
def span():
    """Return a fresh recording span."""
    return RecordingSpan()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no header override in the environment."""
    monkeypatch.delenv(ENV_CLIENT_IP_HEADER, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
