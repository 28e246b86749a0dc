from .referral import (
    CreateUserUseCase,
    GetUserUseCase,
    UsersBehindUseCase,
    UsersAheadUseCase,
    TopUserUseCase,
)

__all__ = [
    "CreateUserUseCase",
    "GetUserUseCase",
    "UsersBehindUseCase",
    "UsersAheadUseCase",
    "TopUserUseCase",
]
