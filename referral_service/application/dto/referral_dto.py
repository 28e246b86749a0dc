from typing import Optional
from pydantic import BaseModel

from .user_dto import NewUserData


class UserRegistrationRequest(BaseModel):
    """DTO for the registration request: user object plus optional referral code"""
    user: Optional[NewUserData] = None
    referral_code: Optional[str] = None


class UserCreatedResponse(BaseModel):
    """DTO for the registration response"""
    id: str
    referral_code: str
    already_exists: bool = False


class RankedUserResponse(BaseModel):
    """DTO for one leaderboard entry"""
    id: str
    points: int


class TopUserResponse(RankedUserResponse):
    """DTO for the top scorer shown on the landing page"""
    username: Optional[str] = None
