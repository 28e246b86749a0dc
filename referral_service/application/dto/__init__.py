from .user_dto import EmailEntry, NewUserData, UserResponse
from .referral_dto import UserRegistrationRequest, UserCreatedResponse, RankedUserResponse, TopUserResponse

__all__ = [
    "EmailEntry",
    "NewUserData",
    "UserResponse",
    "UserRegistrationRequest",
    "UserCreatedResponse",
    "RankedUserResponse",
    "TopUserResponse",
]
