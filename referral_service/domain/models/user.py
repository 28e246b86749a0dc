# Standard library imports
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class EmailAddress:
    """Email entry of a user"""
    address: str
    verified: bool = False

    def validate(self) -> None:
        if not self.address or "@" not in self.address:
            raise ValueError("Invalid email format")


@dataclass
class User:
    """
    Pure domain model for User entity - no external dependencies.

    Only the fields the referral program needs are modelled; the rest of
    the account lives with the user-account service, so records read back
    from the store may have no emails at all (username-only accounts).
    """
    id: Optional[str]
    emails: List[EmailAddress]
    referral_code: str = ""
    points: int = 0
    referred_by: Optional[str] = None
    username: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None
    visitor_info: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def validate(self) -> None:
        """Business validations for a user about to be registered"""
        if not self.emails:
            raise ValueError("At least one email address is required")
        for email in self.emails:
            email.validate()
        if self.points < 0:
            raise ValueError("Points cannot be negative")
        if self.id is not None and self.referred_by == self.id:
            raise ValueError("A user cannot be referred by itself")

    @property
    def primary_email(self) -> Optional[str]:
        return self.emails[0].address if self.emails else None
