# Standard library imports
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RankingQuery:
    """
    Store-agnostic description of a leaderboard slice.

    At most one of points_lt / points_gte is set. Results are ordered by
    points, descending when sort_descending is True, and capped at limit.
    """
    limit: int
    sort_descending: bool = True
    points_lt: Optional[int] = None
    points_gte: Optional[int] = None
    exclude_user_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("Limit cannot be negative")
        if self.points_lt is not None and self.points_gte is not None:
            raise ValueError("Only one of points_lt and points_gte can be set")

    def matches(self, user_id: Optional[str], points: int) -> bool:
        """Whether a user with the given id and points falls in this slice"""
        if self.exclude_user_id is not None and user_id == self.exclude_user_id:
            return False
        if self.points_lt is not None and not points < self.points_lt:
            return False
        if self.points_gte is not None and not points >= self.points_gte:
            return False
        return True
