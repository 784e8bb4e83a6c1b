"""Command-line interface for slashtree."""

from slashtree.cli.main import main

__all__ = ["main"]
