# Local application imports
from ....domain.exceptions import NoSuchUserError
from ....domain.repositories.user_repository import UserRepository
from ...dto.user_dto import UserResponse


class GetUserUseCase:
    """Use case for reading a user's own referral record (code and points)"""

    def __init__(self, user_repository: UserRepository) -> None:
        self.user_repository = user_repository

    async def execute(self, user_id: str) -> UserResponse:
        """
        Get a user by ID

        Args:
            user_id: ID of the user

        Returns:
            UserResponse with referral code, points and referrer

        Raises:
            NoSuchUserError: If user not found
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise NoSuchUserError(user_id)

        return UserResponse(
            id=user.id or "",
            referral_code=user.referral_code,
            points=user.points,
            referred_by=user.referred_by,
        )
