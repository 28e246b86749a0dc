from typing import Any, Dict, List, Optional
from pydantic import BaseModel, EmailStr, Field


class EmailEntry(BaseModel):
    """DTO for one email entry of a new user"""
    address: EmailStr
    verified: Optional[bool] = None


class NewUserData(BaseModel):
    """DTO for the user object submitted at registration"""
    username: Optional[str] = Field(default=None, min_length=1, max_length=200)
    emails: List[EmailEntry] = Field(min_length=1)
    profile: Optional[Dict[str, Any]] = None


class UserResponse(BaseModel):
    """DTO exposing a user's own referral record"""
    id: str
    referral_code: str
    points: int
    referred_by: Optional[str] = None
