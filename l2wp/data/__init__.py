"""Packaged data resources (signature table)."""
