from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.user_repository import UserRepository
from ...application.services.referral_code_generator import ReferralCodeGenerator
from ...application.services.points_award import PointsAwardPolicy
from ...application.services.enrollment_notifier import EnrollmentNotifier
from ...application.use_cases.referral.create_user import CreateUserUseCase
from ...application.use_cases.referral.get_user import GetUserUseCase
from ...application.use_cases.referral.users_behind import UsersBehindUseCase
from ...application.use_cases.referral.users_ahead import UsersAheadUseCase
from ...application.use_cases.referral.top_user import TopUserUseCase

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class ReferralProvider:
    """Referral use case provider - registers all referral and ranking use cases"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register all referral use cases.
        Use cases are created on-demand via factories.
        """
        settings = get_settings()

        # Register CreateUserUseCase
        container.register_factory(
            CreateUserUseCase,
            lambda: CreateUserUseCase(
                user_repository=container.get(UserRepository),
                code_generator=container.get(ReferralCodeGenerator),
                points_award_policy=container.get(PointsAwardPolicy),
                enrollment_notifier=container.get(EnrollmentNotifier),
                max_code_attempts=settings.referral_code_max_attempts,
            )
        )

        # Register GetUserUseCase
        container.register_factory(
            GetUserUseCase,
            lambda: GetUserUseCase(user_repository=container.get(UserRepository))
        )

        # Register ranking use cases
        container.register_factory(
            UsersBehindUseCase,
            lambda: UsersBehindUseCase(user_repository=container.get(UserRepository))
        )
        container.register_factory(
            UsersAheadUseCase,
            lambda: UsersAheadUseCase(user_repository=container.get(UserRepository))
        )
        container.register_factory(
            TopUserUseCase,
            lambda: TopUserUseCase(user_repository=container.get(UserRepository))
        )
