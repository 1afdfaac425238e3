import re
import logging
from typing import Optional, Dict, Any
from email_validator import validate_email as check_email_syntax, EmailNotValidError

from .exceptions import ValidationError
from .models import WaitlistEntry

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"[A-Za-z\s\-']+")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MIN_LENGTH = 5
EMAIL_MAX_LENGTH = 255
# RFC 5321 limits applied by email-validator
LOCAL_PART_LIMIT = 64
ADDRESS_LIMIT = 254


class VerificationService:
    """Service for validating and normalizing waitlist signups"""

    def validate_signup(self, name: Optional[str], email: Optional[str]) -> WaitlistEntry:
        """Validate both fields independently and build a WaitlistEntry.

        Raises ValidationError with one message per failing field.
        """
        name_result = self.validate_name(name)
        email_result = self.validate_email(email)

        field_errors = {}
        if not name_result["valid"]:
            field_errors["name"] = name_result["error"]
        if not email_result["valid"]:
            field_errors["email"] = email_result["error"]

        if field_errors:
            logger.warning(f"Signup validation failed: {field_errors}")
            raise ValidationError(field_errors)

        return WaitlistEntry(email=email_result["value"], name=name_result["value"])

    def validate_name(self, name: Optional[str]) -> Dict[str, Any]:
        name = (name or "").strip()

        if not name:
            return self._invalid("Please enter your name", "NAME_REQUIRED")
        if len(name) < NAME_MIN_LENGTH:
            return self._invalid("Name should be at least 2 characters", "NAME_TOO_SHORT")
        if len(name) > NAME_MAX_LENGTH:
            return self._invalid("Name is too long (maximum 50 characters)", "NAME_TOO_LONG")
        if not NAME_PATTERN.fullmatch(name):
            return self._invalid(
                "Please use only letters, spaces, hyphens, and apostrophes",
                "NAME_INVALID_CHARACTERS",
            )

        return {"valid": True, "value": name}

    def validate_email(self, email: Optional[str]) -> Dict[str, Any]:
        email = (email or "").strip().lower()

        if not email:
            return self._invalid("Please enter your email address", "EMAIL_REQUIRED")
        if len(email) < EMAIL_MIN_LENGTH:
            return self._invalid("Email address is too short", "EMAIL_TOO_SHORT")
        if len(email) > EMAIL_MAX_LENGTH:
            return self._invalid(
                "Email address is too long (maximum 255 characters)", "EMAIL_TOO_LONG"
            )
        if not self._has_valid_syntax(email):
            return self._invalid("Please enter a valid email address", "EMAIL_INVALID")

        return {"valid": True, "value": email}

    def _has_valid_syntax(self, email: str) -> bool:
        """Syntax check that leaves length limits to validate_email.

        email-validator also enforces the RFC 5321 limits (64 characters
        before the @-sign, 254 overall). Addresses over those limits are
        re-checked piecewise: the domain on its own, and the local part in
        dot-separated chunks short enough for the library to accept.
        """
        try:
            check_email_syntax(email, check_deliverability=False)
            return True
        except EmailNotValidError as e:
            logger.info(f"Email syntax rejected: {str(e)}")
            error = e

        local, _, domain = email.rpartition("@")
        if len(local) <= LOCAL_PART_LIMIT and len(email) <= ADDRESS_LIMIT:
            return False
        if not local or not domain or local.startswith('"'):
            return False

        chunk_size = max(1, min(LOCAL_PART_LIMIT, ADDRESS_LIMIT - 1 - len(domain)))
        candidates = [f"a@{domain}"]
        for atom in local.split("."):
            if not atom:
                return False
            candidates.extend(
                f"{atom[i:i + chunk_size]}@{domain}" for i in range(0, len(atom), chunk_size)
            )

        try:
            for candidate in candidates:
                check_email_syntax(candidate, check_deliverability=False)
        except EmailNotValidError as e:
            logger.info(f"Email syntax rejected: {str(e)}")
            return False

        logger.info(f"Accepted address over RFC 5321 length limits: {str(error)}")
        return True

    @staticmethod
    def _invalid(message: str, error_code: str) -> Dict[str, Any]:
        return {"valid": False, "error": message, "error_code": error_code}
