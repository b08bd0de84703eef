"""Serpent: real-time grid arcade simulation."""

__version__ = "0.1.0"
