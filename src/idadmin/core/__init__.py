"""Core functionality: configuration, credentials, errors and dispatch."""
