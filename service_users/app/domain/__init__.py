"""
Users domain package: user models and the fetch service that pages, caches
and decodes responses from the remote directory.
"""

from .models import LookupStatus, User, UserListResponse, UserLookup, UserResponse
from .user_service import UserFetchService

__all__ = [
    "LookupStatus",
    "User",
    "UserFetchService",
    "UserListResponse",
    "UserLookup",
    "UserResponse",
]
