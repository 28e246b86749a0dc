# Standard library imports
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Union

# External package imports
from pydantic import ValidationError

# Local application imports
from ....core.request_context import RequestContext
from ....domain.constants import UserFields
from ....domain.exceptions import (
    CodeSpaceExhaustedError,
    DuplicateEmailError,
    DuplicateReferralCodeError,
    InvalidReferralCodeError,
    InvalidUserShapeError,
    MissingUserObjectError,
)
from ....domain.models.user import EmailAddress, User
from ....domain.repositories.user_repository import UserRepository
from ...dto.referral_dto import UserCreatedResponse
from ...dto.user_dto import NewUserData
from ...services.enrollment_notifier import EnrollmentNotifier, NullEnrollmentNotifier
from ...services.points_award import NoOpPointsAwardPolicy, PointsAwardPolicy
from ...services.referral_code_generator import ReferralCodeGenerator

logger = logging.getLogger(__name__)

# Runs right before insert; may enrich or replace the user record
BeforeCreateHook = Callable[[NewUserData, User], Awaitable[User]]

# Enrollment emails still being sent; kept referenced until they finish
_pending_notifications: Set["asyncio.Task[None]"] = set()


async def wait_for_enrollment_notifications() -> None:
    """Wait for enrollment emails scheduled on the running loop, e.g. on shutdown"""
    loop = asyncio.get_running_loop()
    pending = [task for task in _pending_notifications if task.get_loop() is loop]
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


class CreateUserUseCase:
    """Use case for registering a user and redeeming an optional referral code"""

    def __init__(
        self,
        user_repository: UserRepository,
        code_generator: Optional[ReferralCodeGenerator] = None,
        points_award_policy: Optional[PointsAwardPolicy] = None,
        enrollment_notifier: Optional[EnrollmentNotifier] = None,
        before_create: Optional[BeforeCreateHook] = None,
        max_code_attempts: int = 5,
    ) -> None:
        if max_code_attempts < 1:
            raise ValueError("max_code_attempts must be at least 1")
        self.user_repository = user_repository
        self.code_generator = code_generator or ReferralCodeGenerator()
        self.points_award_policy = points_award_policy or NoOpPointsAwardPolicy()
        self.enrollment_notifier = enrollment_notifier or NullEnrollmentNotifier()
        self.before_create = before_create
        self.max_code_attempts = max_code_attempts

    async def execute(
        self,
        user_data: Union[NewUserData, Dict[str, Any], None],
        referral_code: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> UserCreatedResponse:
        """
        Create a user and, if a referral code was given, link it to its referrer

        Args:
            user_data: User object: at least one email, optional username and profile
            referral_code: Referral code of the referring user
            context: Network origin of the request, stored for fraud analysis

        Returns:
            UserCreatedResponse with the user's ID and referral code. already_exists
            is True when the email was registered before; nothing else happens then.

        Raises:
            MissingUserObjectError: If no user data was supplied
            InvalidUserShapeError: If the user data is malformed
            InvalidReferralCodeError: If the code matches no user. The new user
                is already committed at that point.
            CodeSpaceExhaustedError: If no free referral code could be generated
        """
        new_user_data = self._validate(user_data)
        context = context or RequestContext()
        email = new_user_data.emails[0].address

        user = self._build_user(new_user_data, context)
        if self.before_create is not None:
            user = await self.before_create(new_user_data, user)
        try:
            user.validate()
        except ValueError as exception:
            raise InvalidUserShapeError(str(exception)) from exception

        try:
            created_user = await self._insert_with_unique_code(user)
        except DuplicateEmailError:
            existing_user = await self.user_repository.find_by_email(email)
            if existing_user is None:
                raise RuntimeError(f"Email {email} reported as registered but no user was found")
            logger.warning(f"{email} tried to sign up again from {context.client_ip}")
            return UserCreatedResponse(
                id=existing_user.id or "",
                referral_code=existing_user.referral_code,
                already_exists=True,
            )

        self._schedule_enrollment_notification(created_user)
        logger.info(f"Enrolled {email}")

        if referral_code:
            await self._redeem(created_user, referral_code)

        return UserCreatedResponse(
            id=created_user.id or "",
            referral_code=created_user.referral_code,
            already_exists=False,
        )

    def _validate(self, user_data: Union[NewUserData, Dict[str, Any], None]) -> NewUserData:
        if user_data is None:
            raise MissingUserObjectError()
        if isinstance(user_data, NewUserData):
            return user_data
        if not isinstance(user_data, dict):
            raise InvalidUserShapeError("User object must be a mapping")
        try:
            return NewUserData.model_validate(user_data)
        except ValidationError as exception:
            raise InvalidUserShapeError(
                f"Invalid user object: {exception.error_count()} error(s)",
                details={"errors": exception.errors(include_url=False, include_context=False)},
            ) from exception

    def _build_user(self, user_data: NewUserData, context: RequestContext) -> User:
        # Client-side visitor details travel in the profile but are stored privately
        profile = dict(user_data.profile) if user_data.profile else None
        visitor_info: Dict[str, Any] = {}
        if profile is not None:
            client_info = profile.pop(UserFields.PROFILE_VISITOR_INFO, None)
            if isinstance(client_info, dict):
                visitor_info.update(client_info)
        visitor_info["ip"] = context.client_ip
        if context.user_agent and "userAgent" not in visitor_info:
            visitor_info["userAgent"] = context.user_agent

        return User(
            id=None,  # Will be set by repository
            emails=[EmailAddress(address=user_data.emails[0].address)],
            referral_code="",  # Assigned per insert attempt
            points=0,
            username=user_data.username or None,
            profile=profile or None,
            visitor_info=visitor_info,
            created_at=datetime.now(timezone.utc),
        )

    async def _insert_with_unique_code(self, user: User) -> User:
        """Insert the user, drawing a new referral code until one is free"""
        for attempt in range(1, self.max_code_attempts + 1):
            user.referral_code = self.code_generator.generate()
            if await self.user_repository.find_by_referral_code(user.referral_code) is not None:
                logger.info(f"Referral code collision on attempt {attempt}, retrying")
                continue
            try:
                return await self.user_repository.create(user)
            except DuplicateReferralCodeError:
                # Lost a race with a concurrent registration drawing the same code
                logger.info(f"Referral code taken during insert on attempt {attempt}, retrying")
                continue

        logger.error(f"Could not generate a unique referral code after {self.max_code_attempts} attempts")
        raise CodeSpaceExhaustedError(self.max_code_attempts)

    def _schedule_enrollment_notification(self, user: User) -> None:
        """Send the enrollment email in the background; registration never waits on SMTP"""
        task = asyncio.create_task(self._notify_enrollment(user))
        _pending_notifications.add(task)
        task.add_done_callback(_pending_notifications.discard)

    async def _notify_enrollment(self, user: User) -> None:
        try:
            await self.enrollment_notifier.send_enrollment_notification(user)
        except Exception as e:
            logger.error(f"Enrollment notification failed for user {user.id}: {e}", exc_info=True)

    async def _redeem(self, user: User, referral_code: str) -> None:
        referrer = await self.user_repository.find_by_referral_code(referral_code)
        if referrer is None or referrer.id is None or referrer.id == user.id:
            raise InvalidReferralCodeError(referral_code, user_id=user.id)

        await self.user_repository.set_referrer(user.id or "", referrer.id)
        logger.info(f"User {user.id} was referred by {referrer.id}")

        await self.points_award_policy.award(referrer.id, user.id or "")
