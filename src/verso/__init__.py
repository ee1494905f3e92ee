"""Verso: natural-language reminder parsing."""

__version__ = "0.1.0"
