"""Base exception for everything that can abort processing of one activity."""


class ActivityError(Exception):
    """Raised when an activity cannot be turned into analytics."""
