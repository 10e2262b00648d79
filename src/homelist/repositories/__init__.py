"""Repository interfaces for Homelist."""

from .repository import TaskRepository, decode_cursor, encode_cursor

__all__ = ["TaskRepository", "decode_cursor", "encode_cursor"]
