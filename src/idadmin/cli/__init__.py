"""CLI module for identity administration."""
