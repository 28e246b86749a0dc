# Standard library imports
import logging
from typing import Any, Dict, List, Optional

# External package imports
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

# Local application imports
from ...application.dto.referral_dto import (
    RankedUserResponse,
    TopUserResponse,
    UserCreatedResponse,
    UserRegistrationRequest,
)
from ...application.dto.user_dto import UserResponse
from ...application.use_cases.referral.create_user import CreateUserUseCase
from ...application.use_cases.referral.get_user import GetUserUseCase
from ...application.use_cases.referral.users_behind import UsersBehindUseCase
from ...application.use_cases.referral.users_ahead import UsersAheadUseCase
from ...application.use_cases.referral.top_user import TopUserUseCase
from ...core.request_context import RequestContext
from ...di.container import get_container
from ...domain.exceptions import (
    CodeSpaceExhaustedError,
    InvalidReferralCodeError,
    InvalidUserShapeError,
    MissingUserObjectError,
    NoSuchUserError,
    ReferralServiceError,
)
from .dependencies import get_request_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["referrals"])

MAX_HOW_MANY = 100


def _error_detail(exception: ReferralServiceError) -> Dict[str, Any]:
    return {
        "error": exception.code,
        "message": exception.user_message,
        **exception.details,
    }


@router.post("/users", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserRegistrationRequest,
    response: Response,
    context: RequestContext = Depends(get_request_context),
) -> UserCreatedResponse:
    """
    Register a user, optionally redeeming a referral code

    Args:
        request: User object and optional referral code
        response: Used to downgrade the status to 200 for repeated sign-ups
        context: Caller's network origin (from dependency)

    Returns:
        UserCreatedResponse with the user's ID and referral code
    """
    container = get_container()
    create_user_use_case = container.get(CreateUserUseCase)

    try:
        result = await create_user_use_case.execute(
            request.user,
            referral_code=request.referral_code,
            context=context,
        )
    except (MissingUserObjectError, InvalidUserShapeError) as exception:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_error_detail(exception)
        )
    except InvalidReferralCodeError as exception:
        # The user exists at this point; the detail carries its ID
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error_detail(exception)
        )
    except CodeSpaceExhaustedError as exception:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_error_detail(exception)
        )

    if result.already_exists:
        response.status_code = status.HTTP_200_OK
    return result


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    """
    Get a user's referral record (code, points, referrer)

    Args:
        user_id: ID of the user

    Returns:
        UserResponse
    """
    container = get_container()
    get_user_use_case = container.get(GetUserUseCase)

    try:
        return await get_user_use_case.execute(user_id)
    except NoSuchUserError as exception:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_detail(exception)
        )


@router.get("/users/{user_id}/behind", response_model=List[RankedUserResponse])
async def users_behind(
    user_id: str,
    how_many: int = Query(default=5, ge=0, le=MAX_HOW_MANY),
) -> List[RankedUserResponse]:
    """
    Users right behind the given user, excluding ties with its score

    Args:
        user_id: ID of the target user
        how_many: Maximum number of users to return

    Returns:
        Entries sorted by points descending
    """
    container = get_container()
    users_behind_use_case = container.get(UsersBehindUseCase)

    try:
        return await users_behind_use_case.execute(user_id, how_many)
    except NoSuchUserError as exception:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_detail(exception)
        )


@router.get("/users/{user_id}/ahead", response_model=List[RankedUserResponse])
async def users_ahead(
    user_id: str,
    how_many: int = Query(default=5, ge=0, le=MAX_HOW_MANY),
) -> List[RankedUserResponse]:
    """
    Users right ahead of the given user, including ties with its score

    Args:
        user_id: ID of the target user
        how_many: Maximum number of users to return

    Returns:
        Entries sorted by points ascending
    """
    container = get_container()
    users_ahead_use_case = container.get(UsersAheadUseCase)

    try:
        return await users_ahead_use_case.execute(user_id, how_many)
    except NoSuchUserError as exception:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_detail(exception)
        )


@router.get("/top", response_model=Optional[TopUserResponse])
async def top_user() -> Optional[TopUserResponse]:
    """
    One of the top scorers, or null if nobody has signed up yet
    """
    container = get_container()
    top_user_use_case = container.get(TopUserUseCase)
    return await top_user_use_case.execute()
