"""Command-line interface for clinistat."""

from clinistat.cli.main import app

__all__ = ["app"]
