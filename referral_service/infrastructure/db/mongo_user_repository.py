# Standard library imports
import logging
from typing import Any, Dict, List, Optional

# External package imports
from motor.motor_asyncio import AsyncIOMotorCollection
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.collation import Collation, CollationStrength
from pymongo.errors import DuplicateKeyError

# Local application imports
from ...domain.repositories.user_repository import UserRepository
from ...domain.models.user import EmailAddress, User
from ...domain.models.ranking import RankingQuery
from ...domain.constants import UserFields
from ...domain.exceptions import (
    DuplicateEmailError,
    DuplicateReferralCodeError,
    ReferralServiceError,
)
from .mongo_connection import get_user_collection

logger = logging.getLogger(__name__)

# Email addresses compare case-insensitively, as the account service does
EMAIL_COLLATION = Collation(locale="en", strength=CollationStrength.SECONDARY)


def _to_object_id(user_id: str) -> Optional[ObjectId]:
    if not user_id:
        return None
    try:
        return ObjectId(user_id)
    except (InvalidId, ValueError, TypeError):
        return None


class MongoUserRepository(UserRepository):
    """MongoDB implementation of UserRepository"""

    def __init__(self, user_collection: Optional[AsyncIOMotorCollection] = None) -> None:
        self.user_collection = user_collection if user_collection is not None else get_user_collection()

    async def ensure_indexes(self) -> None:
        """
        Create the indexes the referral program relies on.

        The unique indexes make duplicate email detection and referral code
        uniqueness atomic with the insert.
        """
        await self.user_collection.create_index(
            [(UserFields.EMAILS_ADDRESS, ASCENDING)], unique=True, collation=EMAIL_COLLATION
        )
        await self.user_collection.create_index(
            [(UserFields.REFERRAL_CODE, ASCENDING)], unique=True
        )
        await self.user_collection.create_index([(UserFields.REFERRAL_POINTS, DESCENDING)])
        logger.info("User collection indexes ensured")

    async def create(self, user: User) -> User:
        """
        Insert a new user

        Args:
            user: User domain model without an ID

        Returns:
            Created User domain model with ID set

        Raises:
            DuplicateEmailError: If the email address is already registered
            DuplicateReferralCodeError: If the referral code is already taken
        """
        if not user:
            raise ValueError("User cannot be None")

        try:
            user_dict = self._user_to_dict(user)
            user_dict.pop(UserFields.MONGO_ID, None)

            try:
                result = await self.user_collection.insert_one(user_dict)
            except DuplicateKeyError as error:
                domain_error = self._translate_duplicate_key(error, user)
                if domain_error is None:
                    raise
                raise domain_error from error

            # Fetch and return the newly created document
            new_document = await self.user_collection.find_one({UserFields.MONGO_ID: result.inserted_id})
            if new_document is None:
                raise RuntimeError("User was created but could not be retrieved")

            return self._document_to_user(new_document)
        except (ValueError, ReferralServiceError):
            raise
        except Exception as e:
            raise RuntimeError(f"Error creating user: {str(e)}")

    async def find_by_id(self, user_id: str) -> Optional[User]:
        """
        Find user by ID

        Args:
            user_id: User ID to search for

        Returns:
            User domain model if found, None otherwise (also for malformed IDs)
        """
        object_id = _to_object_id(user_id)
        if object_id is None:
            return None

        try:
            document = await self.user_collection.find_one({UserFields.MONGO_ID: object_id})
            if document is None:
                return None
            return self._document_to_user(document)
        except Exception as e:
            raise RuntimeError(f"Error finding user by ID: {str(e)}")

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        Find user by any of its email addresses

        Args:
            email: Email address to search for

        Returns:
            User domain model if found, None otherwise
        """
        if not email:
            return None

        try:
            document = await self.user_collection.find_one(
                {UserFields.EMAILS_ADDRESS: email}, collation=EMAIL_COLLATION
            )
            if document is None:
                return None
            return self._document_to_user(document)
        except Exception as e:
            raise RuntimeError(f"Error finding user by email: {str(e)}")

    async def find_by_referral_code(self, referral_code: str) -> Optional[User]:
        """
        Find the user owning a referral code

        Args:
            referral_code: Referral code to search for

        Returns:
            User domain model if found, None otherwise
        """
        if not referral_code:
            return None

        try:
            document = await self.user_collection.find_one({UserFields.REFERRAL_CODE: referral_code})
            if document is None:
                return None
            return self._document_to_user(document)
        except Exception as e:
            raise RuntimeError(f"Error finding user by referral code: {str(e)}")

    async def set_referrer(self, user_id: str, referrer_id: str) -> None:
        """
        Record who referred a user. The update only matches while no referrer
        is recorded, so a link is never overwritten.

        Raises:
            ValueError: If the user does not exist, refers to itself or already has a referrer
        """
        object_id = _to_object_id(user_id)
        if object_id is None:
            raise ValueError(f"Invalid user ID format: {user_id}")
        if user_id == referrer_id:
            raise ValueError("A user cannot be referred by itself")

        try:
            update_result = await self.user_collection.update_one(
                {
                    UserFields.MONGO_ID: object_id,
                    UserFields.REFERRAL_REFERRER: {"$exists": False},
                },
                {"$set": {UserFields.REFERRAL_REFERRER: referrer_id}},
            )
        except Exception as e:
            raise RuntimeError(f"Error setting referrer: {str(e)}")

        if update_result.matched_count == 0:
            raise ValueError(f"User with ID {user_id} not found or already has a referrer")

    async def increment_points(self, user_id: str, amount: int) -> None:
        """
        Atomically add points to a user

        Raises:
            ValueError: If the user does not exist
        """
        object_id = _to_object_id(user_id)
        if object_id is None:
            raise ValueError(f"Invalid user ID format: {user_id}")

        try:
            update_result = await self.user_collection.update_one(
                {UserFields.MONGO_ID: object_id},
                {"$inc": {UserFields.REFERRAL_POINTS: amount}},
            )
        except Exception as e:
            raise RuntimeError(f"Error incrementing points: {str(e)}")

        if update_result.matched_count == 0:
            raise ValueError(f"User with ID {user_id} not found")

    async def find_ranked(self, query: RankingQuery) -> List[User]:
        """
        Find users in a leaderboard slice

        Args:
            query: Points bound, excluded user, sort direction and limit

        Returns:
            List of User domain models ordered by points
        """
        # A Mongo limit of 0 means "no limit"
        if query.limit == 0:
            return []

        try:
            cursor = (
                self.user_collection.find(self._ranking_filter(query))
                .sort(UserFields.REFERRAL_POINTS, DESCENDING if query.sort_descending else ASCENDING)
                .limit(query.limit)
            )
            users = []
            async for document in cursor:
                users.append(self._document_to_user(document))
            return users
        except Exception as e:
            raise RuntimeError(f"Error finding ranked users: {str(e)}")

    def _ranking_filter(self, query: RankingQuery) -> Dict[str, Any]:
        """Translate a RankingQuery into a MongoDB filter"""
        mongo_filter: Dict[str, Any] = {}

        if query.points_lt is not None:
            mongo_filter[UserFields.REFERRAL_POINTS] = {"$lt": query.points_lt}
        elif query.points_gte is not None:
            mongo_filter[UserFields.REFERRAL_POINTS] = {"$gte": query.points_gte}

        if query.exclude_user_id is not None:
            object_id = _to_object_id(query.exclude_user_id)
            # A malformed ID cannot match any stored document, nothing to exclude
            if object_id is not None:
                mongo_filter[UserFields.MONGO_ID] = {"$ne": object_id}

        return mongo_filter

    def _translate_duplicate_key(self, error: DuplicateKeyError, user: User) -> Optional[ReferralServiceError]:
        """Map a unique index violation to the matching domain error"""
        details = error.details or {}
        key_pattern = details.get("keyPattern") or {}
        error_text = str(error)

        if UserFields.EMAILS_ADDRESS in key_pattern or UserFields.EMAILS_ADDRESS in error_text:
            key_value = details.get("keyValue") or {}
            return DuplicateEmailError(key_value.get(UserFields.EMAILS_ADDRESS, user.primary_email))
        if UserFields.REFERRAL_CODE in key_pattern or UserFields.REFERRAL_CODE in error_text:
            return DuplicateReferralCodeError(user.referral_code)

        return None

    def _document_to_user(self, document: dict) -> User:
        """
        Convert MongoDB document to User domain model

        Args:
            document: MongoDB document dictionary

        Returns:
            User domain model
        """
        if not document or UserFields.MONGO_ID not in document:
            raise ValueError("Invalid document: missing _id field")

        # Records created before the referral program have no referral subdocument
        referral = document.get(UserFields.REFERRAL) or {}

        return User(
            id=str(document[UserFields.MONGO_ID]),
            emails=[
                EmailAddress(
                    address=entry.get(UserFields.EMAIL_ADDRESS, ""),
                    verified=bool(entry.get(UserFields.EMAIL_VERIFIED, False)),
                )
                for entry in document.get(UserFields.EMAILS, [])
            ],
            referral_code=referral.get(UserFields.CODE, ""),
            points=int(referral.get(UserFields.POINTS) or 0),
            referred_by=referral.get(UserFields.REFERRER),
            username=document.get(UserFields.USERNAME),
            profile=document.get(UserFields.PROFILE),
            visitor_info=document.get(UserFields.VISITOR_INFO) or {},
            created_at=document.get(UserFields.CREATED_AT),
        )

    def _user_to_dict(self, user: User) -> dict:
        """
        Convert User domain model to MongoDB document

        Args:
            user: User domain model

        Returns:
            Dictionary ready for MongoDB storage
        """
        if not user:
            raise ValueError("User cannot be None")

        referral: Dict[str, Any] = {
            UserFields.CODE: user.referral_code,
            UserFields.POINTS: user.points,
        }
        if user.referred_by:
            referral[UserFields.REFERRER] = user.referred_by

        user_dict: Dict[str, Any] = {
            UserFields.EMAILS: [
                {
                    UserFields.EMAIL_ADDRESS: email.address,
                    UserFields.EMAIL_VERIFIED: email.verified,
                }
                for email in user.emails
            ],
            UserFields.VISITOR_INFO: user.visitor_info,
            UserFields.REFERRAL: referral,
            UserFields.CREATED_AT: user.created_at,
        }
        if user.username:
            user_dict[UserFields.USERNAME] = user.username
        if user.profile:
            user_dict[UserFields.PROFILE] = user.profile

        # Only include _id if user.id is valid
        object_id = _to_object_id(user.id) if user.id else None
        if object_id is not None:
            user_dict[UserFields.MONGO_ID] = object_id

        return user_dict
