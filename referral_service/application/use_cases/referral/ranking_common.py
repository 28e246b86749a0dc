# Standard library imports
from typing import List

# Local application imports
from ....domain.exceptions import NoSuchUserError
from ....domain.models.user import User
from ....domain.repositories.user_repository import UserRepository
from ...dto.referral_dto import RankedUserResponse


def validate_how_many(how_many: int) -> None:
    if isinstance(how_many, bool) or not isinstance(how_many, int) or how_many < 0:
        raise ValueError("how_many must be a non-negative integer")


async def load_target_points(user_repository: UserRepository, user_id: str) -> int:
    """Points of the target user; users without a referral record count as 0"""
    user = await user_repository.find_by_id(user_id)
    if user is None:
        raise NoSuchUserError(user_id)
    return user.points or 0


def to_ranked_responses(users: List[User]) -> List[RankedUserResponse]:
    return [RankedUserResponse(id=user.id or "", points=user.points) for user in users]
