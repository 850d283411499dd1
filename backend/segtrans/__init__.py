"""Segment translation service."""

__version__ = "2.1.0"
