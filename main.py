#!/usr/bin/env python3
"""
Command-line entry point for the label unsubscriber.

Loads settings from .env (if present) and hands over to the click CLI.

Usage:
    python main.py init
    python main.py password store user@gmail.com
    python main.py run --email user@gmail.com
    python main.py watch --email user@gmail.com --interval 5
    python main.py log show
"""

import sys
from pathlib import Path

# Allow running from a checkout without installing
sys.path.insert(0, str(Path(__file__).parent))

from src.config import load_config_from_env_file
from src.cli import cli


def main():
    """Main CLI entry point."""
    load_config_from_env_file()
    cli()


if __name__ == '__main__':
    main()
