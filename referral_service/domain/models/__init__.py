from .user import User, EmailAddress
from .ranking import RankingQuery

__all__ = ["User", "EmailAddress", "RankingQuery"]
