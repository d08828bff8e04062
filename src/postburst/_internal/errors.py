"""Custom exception hierarchy for postburst."""

from __future__ import annotations


class PostBurstError(Exception):
    """Base exception for all postburst errors.

    All custom exceptions in postburst inherit from this class, making it
    easy to catch any postburst-specific error with a single except clause.
    """


class ConfigError(PostBurstError):
    """Raised when configuration is invalid or missing.

    Always detected before the first request is sent.

    Examples:
        - ``threads`` is less than 1.
        - ``-data`` is not valid JSON.
        - A ``-header`` value is not in ``key:value`` form.
        - Environment variable has an invalid value.
    """


class DispatchError(PostBurstError):
    """Raised when the dispatcher could not process every work item.

    Only happens when a worker thread dies from an unexpected exception and
    leaves the aggregate short of the requested count.
    """


class RequestError(PostBurstError):
    """Base class for failures of a single request.

    These are never raised out of the executor. They are captured into a
    ``RequestOutcome`` and counted as failures by the aggregate.
    """

    @property
    def kind(self) -> str:
        """Short tag naming the failure class (e.g. ``"NetworkError"``)."""
        return type(self).__name__


class EncodingError(RequestError):
    """The payload could not be serialized to JSON."""


class NetworkError(RequestError):
    """Connection, DNS or timeout failure while reaching the target."""


class ResponseReadError(RequestError):
    """A response arrived but its body could not be fully read."""
