"""Command-line interface for clientip."""
