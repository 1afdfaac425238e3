"""
Exceptions raised along the waitlist signup flow
"""
from typing import Dict, Optional


class WaitlistError(Exception):
    """Base waitlist exception"""
    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ValidationError(WaitlistError):
    """Raised when signup input fails validation, before any network call"""
    def __init__(self, field_errors: Dict[str, str], message: str = "Invalid input"):
        super().__init__(message)
        self.field_errors = field_errors


class ConfigurationError(WaitlistError):
    """Raised when required settings are missing or the private key is malformed"""
    pass


class AuthenticationError(WaitlistError):
    """Raised when the token endpoint rejects the signed assertion"""
    pass


class TransportError(WaitlistError):
    """Raised when a spreadsheet read or append fails"""
    pass


class ConflictError(WaitlistError):
    """Raised when the email is already on the waitlist"""
    pass


class InternalError(WaitlistError):
    """Generic failure surfaced to callers in place of internal details"""
    pass
