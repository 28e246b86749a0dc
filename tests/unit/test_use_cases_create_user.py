"""
Unit tests for CreateUserUseCase (registration, idempotent re-submission, referral redemption).
"""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from referral_service.application.dto.user_dto import NewUserData
from referral_service.application.services.enrollment_notifier import EnrollmentNotifier
from referral_service.application.services.points_award import (
    FixedPointsAwardPolicy,
    PointsAwardPolicy,
)
from referral_service.application.services.referral_code_generator import ReferralCodeGenerator
from referral_service.application.use_cases.referral.create_user import (
    CreateUserUseCase,
    wait_for_enrollment_notifications,
)
from referral_service.core.request_context import RequestContext
from referral_service.domain.exceptions import (
    CodeSpaceExhaustedError,
    DuplicateReferralCodeError,
    InvalidReferralCodeError,
    InvalidUserShapeError,
    MissingUserObjectError,
)


def _user_data(email: str = "new@example.com", **extra) -> dict:
    return {"emails": [{"address": email}], **extra}


def _fixed_codes(*codes: str) -> MagicMock:
    generator = MagicMock(spec=ReferralCodeGenerator)
    generator.generate.side_effect = list(codes)
    return generator


@pytest.fixture
def award_policy():
    return AsyncMock(spec=PointsAwardPolicy)


@pytest.fixture
def notifier():
    notifier = AsyncMock(spec=EnrollmentNotifier)
    notifier.send_enrollment_notification.return_value = True
    return notifier


@pytest.fixture
def use_case(user_repo, award_policy, notifier):
    return CreateUserUseCase(
        user_repository=user_repo,
        points_award_policy=award_policy,
        enrollment_notifier=notifier,
    )


class TestCreateUserWithoutReferral:
    """Tests for plain registration"""

    @pytest.mark.asyncio
    async def test_creates_user_with_fresh_code(self, use_case, user_repo, award_policy):
        result = await use_case.execute(_user_data())

        assert result.already_exists is False
        assert result.id
        assert len(result.referral_code) == 6

        stored = await user_repo.find_by_id(result.id)
        assert stored is not None
        assert stored.points == 0
        assert stored.referred_by is None
        assert stored.referral_code == result.referral_code
        award_policy.award.assert_not_called()

    @pytest.mark.asyncio
    async def test_accepts_pydantic_model(self, use_case, user_repo):
        data = NewUserData.model_validate(_user_data(username="alice"))
        result = await use_case.execute(data)
        stored = await user_repo.find_by_id(result.id)
        assert stored.username == "alice"

    @pytest.mark.asyncio
    async def test_sends_enrollment_notification(self, use_case, notifier):
        result = await use_case.execute(_user_data())
        await wait_for_enrollment_notifications()
        notifier.send_enrollment_notification.assert_awaited_once()
        notified_user = notifier.send_enrollment_notification.await_args.args[0]
        assert notified_user.id == result.id

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_registration(self, use_case, notifier, user_repo):
        notifier.send_enrollment_notification.side_effect = RuntimeError("smtp down")
        result = await use_case.execute(_user_data())
        await wait_for_enrollment_notifications()
        assert result.already_exists is False
        assert await user_repo.find_by_id(result.id) is not None

    @pytest.mark.asyncio
    async def test_empty_referral_code_skips_redemption(self, use_case, award_policy):
        result = await use_case.execute(_user_data(), referral_code="")
        assert result.already_exists is False
        award_policy.award.assert_not_called()

    @pytest.mark.asyncio
    async def test_visitor_info_is_moved_out_of_profile(self, use_case, user_repo):
        data = _user_data(
            profile={"name": "Alice", "_visitorInfo": {"userLanguage": "en-US", "screenWidth": 1280}}
        )
        result = await use_case.execute(
            data, context=RequestContext(client_ip="203.0.113.7", user_agent="Mozilla/5.0")
        )

        stored = await user_repo.find_by_id(result.id)
        assert stored.profile == {"name": "Alice"}
        assert stored.visitor_info["ip"] == "203.0.113.7"
        assert stored.visitor_info["userLanguage"] == "en-US"
        assert stored.visitor_info["screenWidth"] == 1280
        assert stored.visitor_info["userAgent"] == "Mozilla/5.0"

    @pytest.mark.asyncio
    async def test_before_create_hook_can_modify_user(self, user_repo):
        async def tag_user(user_data, user):
            user.visitor_info["campaign"] = "launch"
            return user

        use_case = CreateUserUseCase(user_repository=user_repo, before_create=tag_user)
        result = await use_case.execute(_user_data())
        stored = await user_repo.find_by_id(result.id)
        assert stored.visitor_info["campaign"] == "launch"


class TestCreateUserValidation:
    """Tests for rejected user objects"""

    @pytest.mark.asyncio
    async def test_missing_user_object(self, use_case, user_repo):
        with pytest.raises(MissingUserObjectError):
            await use_case.execute(None)
        assert user_repo.users == {}

    @pytest.mark.asyncio
    async def test_no_emails(self, use_case):
        with pytest.raises(InvalidUserShapeError):
            await use_case.execute({"emails": []})

    @pytest.mark.asyncio
    async def test_email_without_address(self, use_case):
        with pytest.raises(InvalidUserShapeError):
            await use_case.execute({"emails": [{"verified": True}]})

    @pytest.mark.asyncio
    async def test_not_a_mapping(self, use_case):
        with pytest.raises(InvalidUserShapeError):
            await use_case.execute("someone@example.com")

    @pytest.mark.asyncio
    async def test_hook_result_is_validated(self, user_repo):
        async def drop_emails(user_data, user):
            user.emails = []
            return user

        use_case = CreateUserUseCase(user_repository=user_repo, before_create=drop_emails)
        with pytest.raises(InvalidUserShapeError):
            await use_case.execute(_user_data())
        assert user_repo.users == {}


class TestCreateUserDuplicateEmail:
    """Tests for repeated submissions of the same email"""

    @pytest.mark.asyncio
    async def test_second_call_returns_existing_user(self, use_case, user_repo, notifier):
        first = await use_case.execute(_user_data("dup@example.com"))
        second = await use_case.execute(_user_data("dup@example.com"))

        assert second.already_exists is True
        assert second.id == first.id
        assert second.referral_code == first.referral_code
        assert len(user_repo.users) == 1
        await wait_for_enrollment_notifications()
        notifier.send_enrollment_notification.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_is_logged_with_origin(self, use_case, caplog):
        await use_case.execute(_user_data("dup@example.com"))
        with caplog.at_level(logging.WARNING):
            await use_case.execute(
                _user_data("dup@example.com"), context=RequestContext(client_ip="198.51.100.1")
            )
        assert "dup@example.com tried to sign up again from 198.51.100.1" in caplog.text

    @pytest.mark.asyncio
    async def test_duplicate_does_not_redeem_code(self, use_case, user_repo, award_policy):
        referrer = user_repo.add("referrer@example.com", referral_code="REF123")
        await use_case.execute(_user_data("dup@example.com"))
        result = await use_case.execute(_user_data("dup@example.com"), referral_code=referrer.referral_code)

        assert result.already_exists is True
        award_policy.award.assert_not_called()
        stored = await user_repo.find_by_id(result.id)
        assert stored.referred_by is None

    @pytest.mark.asyncio
    async def test_email_match_ignores_case(self, use_case, user_repo):
        first = await use_case.execute(_user_data("Alice@example.com"))
        second = await use_case.execute(_user_data("alice@example.com"))

        assert first.already_exists is False
        assert second.already_exists is True
        assert second.id == first.id
        assert len(user_repo.users) == 1

    @pytest.mark.asyncio
    async def test_concurrent_signups_create_one_record(self, user_repo):
        async def yield_before_insert(user_data, user):
            await asyncio.sleep(0)
            return user

        use_case = CreateUserUseCase(user_repository=user_repo, before_create=yield_before_insert)
        results = await asyncio.gather(
            use_case.execute(_user_data("race@example.com")),
            use_case.execute(_user_data("race@example.com")),
        )

        assert sorted(result.already_exists for result in results) == [False, True]
        assert results[0].id == results[1].id
        assert results[0].referral_code == results[1].referral_code
        assert len(user_repo.users) == 1


class TestCreateUserWithReferral:
    """Tests for referral code redemption"""

    @pytest.mark.asyncio
    async def test_links_referrer_and_fires_hook_once(self, use_case, user_repo, award_policy):
        referrer = user_repo.add("referrer@example.com", referral_code="REF123")

        result = await use_case.execute(_user_data(), referral_code="REF123")

        stored = await user_repo.find_by_id(result.id)
        assert stored.referred_by == referrer.id
        award_policy.award.assert_awaited_once_with(referrer.id, result.id)

    @pytest.mark.asyncio
    async def test_hook_fires_after_link_is_recorded(self, user_repo):
        referrer = user_repo.add("referrer@example.com", referral_code="REF123")
        seen = {}

        class RecordingPolicy(PointsAwardPolicy):
            async def award(self, referrer_id, new_user_id):
                stored = await user_repo.find_by_id(new_user_id)
                seen["referred_by"] = stored.referred_by

        use_case = CreateUserUseCase(user_repository=user_repo, points_award_policy=RecordingPolicy())
        await use_case.execute(_user_data(), referral_code="REF123")
        assert seen["referred_by"] == referrer.id

    @pytest.mark.asyncio
    async def test_fixed_policy_awards_referrer(self, user_repo):
        referrer = user_repo.add("referrer@example.com", points=3, referral_code="REF123")
        use_case = CreateUserUseCase(
            user_repository=user_repo,
            points_award_policy=FixedPointsAwardPolicy(user_repo, points=2),
        )

        await use_case.execute(_user_data(), referral_code="REF123")

        assert (await user_repo.find_by_id(referrer.id)).points == 5

    @pytest.mark.asyncio
    async def test_default_policy_is_no_op(self, user_repo):
        referrer = user_repo.add("referrer@example.com", points=3, referral_code="REF123")
        use_case = CreateUserUseCase(user_repository=user_repo)

        result = await use_case.execute(_user_data(), referral_code="REF123")

        assert (await user_repo.find_by_id(result.id)).referred_by == referrer.id
        assert (await user_repo.find_by_id(referrer.id)).points == 3

    @pytest.mark.asyncio
    async def test_invalid_code_keeps_created_user(self, use_case, user_repo, award_policy):
        with pytest.raises(InvalidReferralCodeError) as exc_info:
            await use_case.execute(_user_data("new@example.com"), referral_code="nonexistent-code")

        error = exc_info.value
        assert error.referral_code == "nonexistent-code"
        assert "User created, but invalid referral code" in str(error)

        stored = await user_repo.find_by_email("new@example.com")
        assert stored is not None
        assert stored.id == error.user_id
        assert stored.referred_by is None
        award_policy.award.assert_not_called()


class TestReferralCodeUniqueness:
    """Tests for the generate-and-check retry loop"""

    @pytest.mark.asyncio
    async def test_retries_on_code_already_in_store(self, user_repo):
        user_repo.add("taken@example.com", referral_code="AAAAAA")
        use_case = CreateUserUseCase(
            user_repository=user_repo,
            code_generator=_fixed_codes("AAAAAA", "BBBBBB"),
        )

        result = await use_case.execute(_user_data())
        assert result.referral_code == "BBBBBB"

    @pytest.mark.asyncio
    async def test_retries_when_insert_loses_race(self):
        repo = AsyncMock()
        repo.find_by_referral_code.return_value = None
        created = MagicMock(id="usr-1", referral_code="BBBBBB")
        repo.create.side_effect = [DuplicateReferralCodeError("AAAAAA"), created]

        use_case = CreateUserUseCase(
            user_repository=repo,
            code_generator=_fixed_codes("AAAAAA", "BBBBBB"),
        )
        result = await use_case.execute(_user_data())

        assert result.id == "usr-1"
        assert result.referral_code == "BBBBBB"
        assert repo.create.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, user_repo):
        user_repo.add("taken@example.com", referral_code="AAAAAA")
        use_case = CreateUserUseCase(
            user_repository=user_repo,
            code_generator=_fixed_codes(*["AAAAAA"] * 3),
            max_code_attempts=3,
        )

        with pytest.raises(CodeSpaceExhaustedError) as exc_info:
            await use_case.execute(_user_data())
        assert exc_info.value.attempts == 3
        assert len(user_repo.users) == 1

    def test_rejects_zero_attempts(self, user_repo):
        with pytest.raises(ValueError):
            CreateUserUseCase(user_repository=user_repo, max_code_attempts=0)


class TestStoreErrorsPropagate:
    """Store failures other than duplicates reach the caller unchanged"""

    @pytest.mark.asyncio
    async def test_create_failure_propagates(self):
        repo = AsyncMock()
        repo.find_by_referral_code.return_value = None
        repo.create.side_effect = RuntimeError("Error creating user: connection refused")

        use_case = CreateUserUseCase(user_repository=repo)
        with pytest.raises(RuntimeError, match="connection refused"):
            await use_case.execute(_user_data())


class TestEnrollmentNotificationInBackground:
    """The enrollment email is sent after registration returns"""

    @pytest.mark.asyncio
    async def test_registration_does_not_wait_for_email(self, user_repo, award_policy):
        referrer = user_repo.add("referrer@example.com", referral_code="REF123")
        release = asyncio.Event()
        sent = []

        class SlowNotifier(EnrollmentNotifier):
            async def send_enrollment_notification(self, user):
                await release.wait()
                sent.append(user.id)
                return True

        use_case = CreateUserUseCase(
            user_repository=user_repo,
            points_award_policy=award_policy,
            enrollment_notifier=SlowNotifier(),
        )

        result = await asyncio.wait_for(
            use_case.execute(_user_data(), referral_code="REF123"), timeout=1
        )

        assert (await user_repo.find_by_id(result.id)).referred_by == referrer.id
        award_policy.award.assert_awaited_once_with(referrer.id, result.id)
        assert sent == []

        release.set()
        await wait_for_enrollment_notifications()
        assert sent == [result.id]

    @pytest.mark.asyncio
    async def test_email_sent_even_if_referral_code_is_invalid(self, use_case, notifier):
        with pytest.raises(InvalidReferralCodeError) as exc_info:
            await use_case.execute(_user_data(), referral_code="nonexistent-code")

        await wait_for_enrollment_notifications()
        notifier.send_enrollment_notification.assert_awaited_once()
        notified_user = notifier.send_enrollment_notification.await_args.args[0]
        assert notified_user.id == exc_info.value.user_id
