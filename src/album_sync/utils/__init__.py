"""Utility helpers for the album-sync application."""
