"""Exceptions raised by the Verano eModul integration."""


class VeranoError(Exception):
    """Base exception for Verano eModul errors."""


class VeranoConfigError(VeranoError):
    """Exception raised for missing credentials or invalid device settings."""


class VeranoAuthError(VeranoError):
    """Exception raised when the backend rejects a login or a session."""


class VeranoTransportError(VeranoError):
    """Exception raised for failed requests after the allowed retry."""


class VeranoNotFoundError(VeranoError):
    """Exception raised when the configured tile is missing from a response."""
