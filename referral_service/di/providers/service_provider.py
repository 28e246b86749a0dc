import logging
from typing import TYPE_CHECKING
from ...core.config import get_settings
from ...domain.repositories.user_repository import UserRepository
from ...application.services.referral_code_generator import ReferralCodeGenerator
from ...application.services.points_award import (
    FixedPointsAwardPolicy,
    NoOpPointsAwardPolicy,
    PointsAwardPolicy,
)
from ...application.services.enrollment_notifier import EnrollmentNotifier, NullEnrollmentNotifier
from ...infrastructure.notifications.email_enrollment_notifier import EmailEnrollmentNotifier

if TYPE_CHECKING:
    from ..base_container import BaseContainer

logger = logging.getLogger(__name__)


class ServiceProvider:
    """Registers the pluggable referral services, chosen from settings"""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        settings = get_settings()

        container.register_singleton(
            ReferralCodeGenerator,
            ReferralCodeGenerator(length=settings.referral_code_length)
        )

        # Points award policy: fixed amount per referral, or nothing at all
        points_policy: PointsAwardPolicy
        if settings.referral_points_per_referral > 0:
            points_policy = FixedPointsAwardPolicy(
                user_repository=container.get(UserRepository),
                points=settings.referral_points_per_referral,
            )
        else:
            points_policy = NoOpPointsAwardPolicy()
        container.register_singleton(PointsAwardPolicy, points_policy)

        email_notifier = EmailEnrollmentNotifier(settings)
        notifier: EnrollmentNotifier
        if settings.enrollment_email_enabled and email_notifier.is_configured:
            notifier = email_notifier
        else:
            logger.info("Enrollment emails disabled or SMTP not configured; notifications are skipped")
            notifier = NullEnrollmentNotifier()
        container.register_singleton(EnrollmentNotifier, notifier)
