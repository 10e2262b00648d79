"""Homelist services."""
