"""Render-time placeholder resolution."""
