"""Homelist CLI commands."""
