"""
Command-line interface for datagate.

Provides Click-based CLI commands for serving the REST API,
checking backend health, and querying tables.
"""

from datagate.cli.main import cli

__all__ = ["cli"]
