"""Data models for identity administration."""
