"""Core translation engine."""
