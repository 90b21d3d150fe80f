"""Functionality detection and substitute-component recommendations."""
