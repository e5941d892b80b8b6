"""Error taxonomy shared by the request handlers and the found-item trigger.

The message of each error is what ends up in the ``{"error": ...}`` body.
"""
from __future__ import annotations


class MatchingError(Exception):
    """Base class for every failure raised by this service."""


class ValidationError(MatchingError):
    """A required request field is missing or blank (client error, 400)."""


class InvalidReferenceError(MatchingError):
    """A storage URL does not follow the ``/o/<path>?`` encoding."""


class NotFoundError(MatchingError):
    """The resolved storage path holds no object."""


class UpstreamError(MatchingError):
    """The description or embedding model failed or returned nothing usable."""


class EvaluationError(MatchingError):
    """A match pass could not complete (e.g. the alert set failed to load).

    Never surfaced to a caller: the trigger logs it and returns normally.
    """
