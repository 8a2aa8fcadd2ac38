"""
Error taxonomy for the blog engine.

Generation failures are recovered locally with template fallbacks, publish
failures are surfaced to the caller as structured results and configuration
problems fail fast at first use.
"""

from typing import Optional


class GenerationError(Exception):
    """Raised when the text-generation service cannot produce usable text."""
    pass


class ConfigurationError(Exception):
    """Raised when required credentials or settings are missing."""
    pass


class PublishError(Exception):
    """Raised when the publishing service rejects or cannot receive a document."""

    REASONS = ("auth", "not_found", "forbidden", "unknown")

    def __init__(self, message: str, reason: str = "unknown", status_code: Optional[int] = None):
        super().__init__(message)
        self.reason = reason if reason in self.REASONS else "unknown"
        self.status_code = status_code
