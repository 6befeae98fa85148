"""
VideoFlux command-line interface.

This package provides the CLI for working with an Android device
from the command line.
"""

from videoflux.cli.main import cli

__all__ = ["cli"]
