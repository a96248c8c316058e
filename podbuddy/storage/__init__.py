"""Persistent storage for podbuddy sessions."""

from .session_store import SessionStore

__all__ = ["SessionStore"]
