"""Shared logging and settings used by every entry point."""
