"""Error taxonomy for the research workflow.

Nothing in the core recovers from these locally. Any error raised during a
phase or during artifact assembly aborts the run and propagates to the caller.
"""

from typing import Optional


class ResearchError(Exception):
    """Base class for all research workflow errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ResearchError):
    """Missing credential or invalid configuration.

    Raised before any network call is attempted.
    """


class TransportError(ResearchError):
    """The completion call could not be completed at all.

    Covers connection failures, timeouts and malformed response envelopes.
    """


class UpstreamError(ResearchError):
    """The completion service answered with a non-success status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Claude API error: {status_code} - {message}")
        self.status_code = status_code
        self.upstream_message = message


class ArtifactGenerationError(ResearchError):
    """Rendering or serialization failed after all phases succeeded."""


class ResearchCancelledError(ResearchError):
    """The caller cancelled the run between phases."""

    def __init__(self, message: str = "Research cancelled", phase: Optional[str] = None):
        super().__init__(message)
        self.phase = phase
