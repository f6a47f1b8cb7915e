# core/errors.py

from __future__ import annotations

from typing import Optional


class TravelPlannerError(Exception):
    """Base class for every error raised by the planner."""


class ConfigurationError(TravelPlannerError):
    """A required setting (typically GEMINI_API_KEY) is missing."""


class TransportError(TravelPlannerError):
    """
    The call to the model provider failed.
    `raw_response` always holds the verbatim body for diagnostics.
    """

    def __init__(self, message: str, raw_response: str = "", status_code: Optional[int] = None):
        self.raw_response = raw_response
        self.status_code = status_code
        if raw_response:
            message = f"{message}. Raw response: {raw_response}"
        super().__init__(message)


class AuthError(TransportError):
    pass


class RateLimitError(TransportError):
    pass


class ProviderError(TransportError):
    pass


class EmptyResponseError(TransportError):
    pass


class ParseError(TravelPlannerError):
    """Model output could not be recovered as a JSON object."""


class ShapeError(TravelPlannerError):
    """Normalization hit a structure it could not coerce."""
