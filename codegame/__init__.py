"""Shared utilities for the CodeGame command line tools."""

__version__ = "0.9.0"
