"""
CLI entry point for running datagate as a module.

Usage: python -m datagate [OPTIONS] COMMAND [ARGS]...
"""

from datagate.cli.main import cli

if __name__ == "__main__":
    cli()
