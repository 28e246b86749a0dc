# Standard library imports
from typing import List

# Local application imports
from ....domain.models.ranking import RankingQuery
from ....domain.repositories.user_repository import UserRepository
from ...dto.referral_dto import RankedUserResponse
from .ranking_common import load_target_points, to_ranked_responses, validate_how_many


class UsersBehindUseCase:
    """Use case for listing the users right behind a user on the leaderboard"""

    def __init__(self, user_repository: UserRepository) -> None:
        self.user_repository = user_repository

    async def execute(self, user_id: str, how_many: int) -> List[RankedUserResponse]:
        """
        Return the how_many users behind the specified user, without ties for its score

        Only users with strictly fewer points qualify, so users tied with the
        target never appear. Closest scores come first.

        Args:
            user_id: ID of the target user
            how_many: Maximum number of users to return

        Returns:
            Up to how_many entries sorted by points descending

        Raises:
            NoSuchUserError: If user_id does not resolve to a user
        """
        validate_how_many(how_many)
        points = await load_target_points(self.user_repository, user_id)
        if how_many == 0:
            return []

        users = await self.user_repository.find_ranked(
            RankingQuery(limit=how_many, sort_descending=True, points_lt=points)
        )
        return to_ranked_responses(users)
