"""podwatch command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``podwatch`` script).
"""

from podwatch.cli.main import cli

__all__ = ["cli"]
