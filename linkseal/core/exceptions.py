"""
Custom Exceptions

This module defines the error taxonomy for URL protection and expiry.

Only programmer and configuration mistakes are exceptions. A URL that fails
verification or has aged out is an expected outcome and is reported as a
boolean by the services, never raised.
"""


class LinkSealException(Exception):
    """Base exception for the link protection service."""
    pass


class InvalidArgumentError(LinkSealException):
    """Raised when a required input is missing or unusable."""

    def __init__(self, argument: str, reason: str = "A value is required"):
        self.argument = argument
        self.reason = reason
        super().__init__(f"{reason}: {argument}")


class InvalidStateError(LinkSealException):
    """Raised for a relative URL where an absolute one is needed, or an empty salt."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ServiceUnavailableError(LinkSealException):
    """Raised when a required service is not configured."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service '{service_name}' is unavailable")
