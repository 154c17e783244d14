"""Sync Obsidian Tasks checklists in markdown files with a SQLite task database."""

__version__ = "0.1.0"