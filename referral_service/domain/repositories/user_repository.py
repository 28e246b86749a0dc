from abc import ABC, abstractmethod
from typing import List, Optional
from ..models.user import User
from ..models.ranking import RankingQuery


class UserRepository(ABC):
    """Repository interface - defines contract for user data access"""

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Insert a new user and return it with its ID set.

        Raises DuplicateEmailError if the email is already registered and
        DuplicateReferralCodeError if the referral code is taken. Both checks
        must be atomic with the insert.
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find user by ID"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by any of its email addresses"""
        pass

    @abstractmethod
    async def find_by_referral_code(self, referral_code: str) -> Optional[User]:
        """Find the user owning a referral code"""
        pass

    @abstractmethod
    async def set_referrer(self, user_id: str, referrer_id: str) -> None:
        """Atomically record the referrer of a user, only if none is recorded yet"""
        pass

    @abstractmethod
    async def increment_points(self, user_id: str, amount: int) -> None:
        """Atomically add amount to the user's points"""
        pass

    @abstractmethod
    async def find_ranked(self, query: RankingQuery) -> List[User]:
        """Find users matching a leaderboard slice, ordered by points"""
        pass
