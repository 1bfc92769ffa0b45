"""Service for generating stable identifiers for practice sessions."""

from ulid import ULID


def generate_session_id() -> str:
    """Generate a sortable session ID using ULID."""
    return f"session_{ULID()}"
