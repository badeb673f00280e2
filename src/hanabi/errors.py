"""Exceptions raised by the tracker's state transitions.

Every error is raised before a new state is built, so the caller's state is
untouched and the request can simply be retried with corrected input.
"""


class TrackerError(ValueError):
    """Base class for rejected tracker operations."""


class InvalidReferenceError(TrackerError):
    """Unknown player, out-of-range position or nothing pending."""


class InvalidInputError(TrackerError):
    """Missing or inconsistent values for an otherwise valid reference."""


class ResourceExhaustedError(TrackerError):
    """No hint tokens left to pay for a clue."""
