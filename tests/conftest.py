"""
Shared pytest fixtures for referral service tests.
"""
import os
from dataclasses import replace
from typing import Dict, List, Optional
from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId

from referral_service.domain.exceptions import DuplicateEmailError, DuplicateReferralCodeError
from referral_service.domain.models.ranking import RankingQuery
from referral_service.domain.models.user import EmailAddress, User
from referral_service.domain.repositories.user_repository import UserRepository


class InMemoryUserRepository(UserRepository):
    """UserRepository fake enforcing the same unique constraints as the Mongo indexes
    (email addresses compare case-insensitively)."""

    def __init__(self) -> None:
        self.users: Dict[str, User] = {}
        self.create_calls = 0

    async def create(self, user: User) -> User:
        self.create_calls += 1
        for existing in self.users.values():
            existing_addresses = {email.address.lower() for email in existing.emails}
            if any(email.address.lower() in existing_addresses for email in user.emails):
                raise DuplicateEmailError(user.primary_email)
            if existing.referral_code == user.referral_code:
                raise DuplicateReferralCodeError(user.referral_code)
        stored = replace(user, id=str(ObjectId()))
        self.users[stored.id] = stored
        return replace(stored)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        user = self.users.get(user_id)
        return replace(user) if user else None

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if any(entry.address.lower() == email.lower() for entry in user.emails):
                return replace(user)
        return None

    async def find_by_referral_code(self, referral_code: str) -> Optional[User]:
        for user in self.users.values():
            if user.referral_code == referral_code:
                return replace(user)
        return None

    async def set_referrer(self, user_id: str, referrer_id: str) -> None:
        user = self.users.get(user_id)
        if user is None or user.referred_by is not None or user_id == referrer_id:
            raise ValueError(f"User with ID {user_id} not found or already has a referrer")
        user.referred_by = referrer_id

    async def increment_points(self, user_id: str, amount: int) -> None:
        user = self.users.get(user_id)
        if user is None:
            raise ValueError(f"User with ID {user_id} not found")
        user.points += amount

    async def find_ranked(self, query: RankingQuery) -> List[User]:
        matching = [u for u in self.users.values() if query.matches(u.id, u.points)]
        matching.sort(key=lambda u: u.points, reverse=query.sort_descending)
        return [replace(u) for u in matching[: query.limit]]

    def add(
        self,
        email: Optional[str],
        points: int = 0,
        referral_code: Optional[str] = None,
        username: Optional[str] = None,
    ) -> User:
        """Seed a stored user directly; email=None seeds a username-only account."""
        user_id = str(ObjectId())
        user = User(
            id=user_id,
            emails=[EmailAddress(address=email)] if email else [],
            referral_code=referral_code or f"c{user_id[-5:]}",
            points=points,
            username=username,
        )
        self.users[user_id] = user
        return user


@pytest.fixture
def user_repo():
    """In-memory user repository."""
    return InMemoryUserRepository()


@pytest.fixture
def mock_env():
    """Fixture to set common test environment variables."""
    env_vars = {
        "MONGO_URI": "mongodb://localhost:27017",
        "MONGO_DB_NAME": "test_referral_db",
        "REFERRAL_CODE_LENGTH": "6",
        "REFERRAL_POINTS_PER_REFERRAL": "1",
        "HTTP_FORWARDED_COUNT": "0",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def mock_settings():
    """Fixture to mock get_settings for tests. Patches all modules that use it."""
    mock = MagicMock()
    mock.mongo_uri = "mongodb://localhost:27017"
    mock.mongo_database_name = "test_db"
    mock.referral_code_length = 6
    mock.referral_code_max_attempts = 5
    mock.referral_points_per_referral = 1
    mock.http_forwarded_count = 0
    mock.enrollment_email_enabled = True
    mock.smtp_host = "smtp.example.com"
    mock.smtp_port = 587
    mock.smtp_user = "mailer"
    mock.smtp_password = "secret"
    mock.smtp_use_tls = False
    mock.email_from = "no-reply@example.com"
    mock.email_from_name = "Referral Program"
    mock.app_base_url = "https://example.com"

    # Patch at source and at use sites (modules import get_settings at load time)
    with patch("referral_service.core.config.get_settings", return_value=mock), patch(
        "referral_service.api.v1.dependencies.get_settings", return_value=mock
    ), patch(
        "referral_service.infrastructure.notifications.email_enrollment_notifier.get_settings",
        return_value=mock,
    ):
        yield mock
