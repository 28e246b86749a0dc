# Standard library imports
import logging
from abc import ABC, abstractmethod

# Local application imports
from ...domain.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class PointsAwardPolicy(ABC):
    """
    Extension point invoked once per successful referral.

    Called with (referrer_id, new_user_id) right after the referral link is
    stored. The return value is ignored.
    """

    @abstractmethod
    async def award(self, referrer_id: str, new_user_id: str) -> None:
        pass


class NoOpPointsAwardPolicy(PointsAwardPolicy):
    """Default policy: referrals are linked but earn nothing"""

    async def award(self, referrer_id: str, new_user_id: str) -> None:
        return None


class FixedPointsAwardPolicy(PointsAwardPolicy):
    """Gives the referrer a fixed number of points per referred user"""

    def __init__(self, user_repository: UserRepository, points: int = 1) -> None:
        if points < 0:
            raise ValueError("Awarded points cannot be negative")
        self.user_repository = user_repository
        self.points = points

    async def award(self, referrer_id: str, new_user_id: str) -> None:
        if self.points == 0:
            return
        await self.user_repository.increment_points(referrer_id, self.points)
        logger.info(f"Awarded {self.points} point(s) to {referrer_id} for referring {new_user_id}")
