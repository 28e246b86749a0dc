from .create_user import CreateUserUseCase, BeforeCreateHook, wait_for_enrollment_notifications
from .get_user import GetUserUseCase
from .users_behind import UsersBehindUseCase
from .users_ahead import UsersAheadUseCase
from .top_user import TopUserUseCase

__all__ = [
    "CreateUserUseCase",
    "BeforeCreateHook",
    "wait_for_enrollment_notifications",
    "GetUserUseCase",
    "UsersBehindUseCase",
    "UsersAheadUseCase",
    "TopUserUseCase",
]
