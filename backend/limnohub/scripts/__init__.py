"""Maintenance and batch scripts."""
