"""Decree CLI module.

Provides a Textual-based terminal interface for playing Decree scenarios.

Usage:
    decree --scenario my_scenario.json --seed 7

Or directly:
    python -m decree.cli.app
"""

from decree.cli.app import DecreeApp, main

__all__ = ["DecreeApp", "main"]
