"""Command-line interface for quorum-vault."""
from .main import cli, main

__all__ = ["cli", "main"]
