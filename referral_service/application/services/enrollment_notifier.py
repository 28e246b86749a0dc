# Standard library imports
from abc import ABC, abstractmethod

# Local application imports
from ...domain.models.user import User


class EnrollmentNotifier(ABC):
    """Sends the welcome notification to a newly registered user"""

    @abstractmethod
    async def send_enrollment_notification(self, user: User) -> bool:
        """
        Notify the user. Implementations log failures and return False
        instead of raising.
        """
        pass


class NullEnrollmentNotifier(EnrollmentNotifier):
    """Used when no notification channel is configured"""

    async def send_enrollment_notification(self, user: User) -> bool:
        return False
