"""Smoke tests: verify package imports and basic structure."""


def test_package_imports():
    """All modules should be importable."""
    import clientip
    import clientip.address
    import clientip.cli.main
    import clientip.config
    import clientip.headers
    import clientip.parsers
    import clientip.ranges
    import clientip.report
    import clientip.resolver


def test_version():
    import clientip

    assert clientip.__version__ == "0.1.0"


def test_public_api():
    import clientip

    headers = clientip.HeaderSet.from_mapping({"X-Forwarded-For": "10.0.0.1, 8.8.8.8"})
    assert str(clientip.resolve(headers)) == "8.8.8.8"
