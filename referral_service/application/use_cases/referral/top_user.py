# Standard library imports
from typing import Optional

# Local application imports
from ....domain.models.ranking import RankingQuery
from ....domain.repositories.user_repository import UserRepository
from ...dto.referral_dto import TopUserResponse


class TopUserUseCase:
    """Use case for fetching one of the top scorers, e.g. for the landing page"""

    def __init__(self, user_repository: UserRepository) -> None:
        self.user_repository = user_repository

    async def execute(self) -> Optional[TopUserResponse]:
        """
        Return the highest-scoring user; ties are broken by store order

        Returns:
            TopUserResponse with id, points and username, or None if there are no users yet
        """
        users = await self.user_repository.find_ranked(RankingQuery(limit=1, sort_descending=True))
        if not users:
            return None
        top = users[0]
        return TopUserResponse(id=top.id or "", points=top.points, username=top.username)
