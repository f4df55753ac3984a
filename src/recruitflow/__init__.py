"""Recruiting pipeline gateway and client application core."""

__version__ = "0.1.0"
