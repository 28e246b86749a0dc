"""Constants for User model field names"""


class UserFields:
    """Field name constants for User model"""
    ID = "id"
    USERNAME = "username"
    EMAILS = "emails"
    EMAIL_ADDRESS = "address"
    EMAIL_VERIFIED = "verified"
    PROFILE = "profile"
    VISITOR_INFO = "visitor_info"
    REFERRAL = "referral"
    CREATED_AT = "created_at"

    # Keys inside the referral subdocument
    CODE = "code"
    POINTS = "points"
    REFERRER = "referrer"

    # Dotted paths used in queries and updates
    EMAILS_ADDRESS = "emails.address"
    REFERRAL_CODE = "referral.code"
    REFERRAL_POINTS = "referral.points"
    REFERRAL_REFERRER = "referral.referrer"

    # Client-side visitor blob that arrives inside the profile
    PROFILE_VISITOR_INFO = "_visitorInfo"

    # MongoDB specific
    MONGO_ID = "_id"  # MongoDB's internal _id field
