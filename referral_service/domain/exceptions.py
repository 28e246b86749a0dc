"""
Custom exception hierarchy for the referral service.

Raised by repositories and use cases, translated to HTTP errors by the API
layer. Every exception carries a machine-readable code and a user-facing
message.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional


# -----------------------------------------------------------------------------
# Base
# -----------------------------------------------------------------------------


class ReferralServiceError(Exception):
    """Base exception for all referral service errors."""

    code = "referral-error"

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.details = details or {}


# -----------------------------------------------------------------------------
# Input validation
# -----------------------------------------------------------------------------


class MissingUserObjectError(ReferralServiceError):
    """Raised when no user data was supplied."""

    code = "no-user-object"

    def __init__(self) -> None:
        super().__init__("Please supply a user object")


class InvalidUserShapeError(ReferralServiceError):
    """Raised when user data is missing required fields or is malformed."""

    code = "invalid-user-shape"


# -----------------------------------------------------------------------------
# Store constraints
# -----------------------------------------------------------------------------


class DuplicateEmailError(ReferralServiceError):
    """Raised by the store when the email address is already registered."""

    code = "duplicate-email"

    def __init__(self, email: str) -> None:
        super().__init__(
            f"Email already exists: {email}",
            details={"email": email},
        )
        self.email = email


class DuplicateReferralCodeError(ReferralServiceError):
    """Raised by the store when a generated referral code is already taken."""

    code = "duplicate-referral-code"

    def __init__(self, referral_code: str) -> None:
        super().__init__(
            f"Referral code already exists: {referral_code}",
            details={"referral_code": referral_code},
        )
        self.referral_code = referral_code


class CodeSpaceExhaustedError(ReferralServiceError):
    """Raised when no unused referral code could be generated within the retry budget."""

    code = "code-space-exhausted"

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Could not generate a unique referral code after {attempts} attempts",
            user_message="Could not complete the registration. Please try again.",
            details={"attempts": attempts},
        )
        self.attempts = attempts


# -----------------------------------------------------------------------------
# Referral redemption and lookups
# -----------------------------------------------------------------------------


class InvalidReferralCodeError(ReferralServiceError):
    """
    Raised when a supplied referral code does not resolve to a referrer.

    The new user has already been committed when this is raised; user_id
    identifies it so callers can report the partial success.
    """

    code = "invalid-referral-code"

    def __init__(self, referral_code: str, user_id: Optional[str] = None) -> None:
        super().__init__(
            f"User created, but invalid referral code: {referral_code}",
            details={"referral_code": referral_code, "user_id": user_id},
        )
        self.referral_code = referral_code
        self.user_id = user_id


class NoSuchUserError(ReferralServiceError):
    """Raised when a user id does not resolve to any record."""

    code = "no-such-userid"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"No such userId: {user_id}",
            details={"user_id": user_id},
        )
        self.user_id = user_id
