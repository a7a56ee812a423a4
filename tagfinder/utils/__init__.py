"""Utility modules for tag-finder."""
