"""Utilities module: validators, logging, time conversion and console."""
