"""Command-line interface for album-sync."""
