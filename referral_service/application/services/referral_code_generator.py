# Standard library imports
import secrets

# Characters that cannot be confused with one another when read or typed
UNAMBIGUOUS_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTWXYZabcdefghijkmnopqrstuvwxyz"
DEFAULT_CODE_LENGTH = 6


class ReferralCodeGenerator:
    """
    Generates short, human-shareable referral codes.

    With the default 6 characters over a 55 character alphabet there are
    about 2.8e10 codes, so collisions are rare but possible; callers check
    the store and retry.
    """

    def __init__(self, length: int = DEFAULT_CODE_LENGTH, alphabet: str = UNAMBIGUOUS_ALPHABET) -> None:
        if length < 1:
            raise ValueError("Referral code length must be at least 1")
        if len(set(alphabet)) < 2:
            raise ValueError("Referral code alphabet needs at least 2 distinct characters")
        self.length = length
        self.alphabet = alphabet

    def generate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
