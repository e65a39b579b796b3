"""Sync-licensing business backend: songs, contacts, deals, pitches and payments."""

__version__ = "1.0.0"
