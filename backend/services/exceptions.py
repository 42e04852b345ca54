"""
Error taxonomy for the flight search assistant
"""
from typing import Optional


class FlightAssistantError(Exception):
    pass


class ConfigurationError(FlightAssistantError):
    pass


class ValidationError(FlightAssistantError):
    pass


class UpstreamError(FlightAssistantError):
    """Failure talking to a third-party API; keeps status and body for diagnostics"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthError(UpstreamError):
    pass


class SearchError(UpstreamError):
    pass


class ConversionError(FlightAssistantError):
    pass


class OfferFormatError(FlightAssistantError):
    pass


class GenerationError(FlightAssistantError):
    pass
