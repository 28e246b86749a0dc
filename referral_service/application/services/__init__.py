from .referral_code_generator import ReferralCodeGenerator, UNAMBIGUOUS_ALPHABET
from .points_award import PointsAwardPolicy, NoOpPointsAwardPolicy, FixedPointsAwardPolicy
from .enrollment_notifier import EnrollmentNotifier, NullEnrollmentNotifier

__all__ = [
    "ReferralCodeGenerator",
    "UNAMBIGUOUS_ALPHABET",
    "PointsAwardPolicy",
    "NoOpPointsAwardPolicy",
    "FixedPointsAwardPolicy",
    "EnrollmentNotifier",
    "NullEnrollmentNotifier",
]
