"""
User fetch service: pagination, caching and error translation over the
remote user directory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from shared.errors import ExternalServiceError, ExternalServiceTimeoutError, UserNotFoundError
from shared.logging import get_logger
from service_users.app.caching.base import CacheBackend
from .models import LookupStatus, User, UserListResponse, UserLookup, UserResponse

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from service_users.app.adapters.reqres_client import ReqResClient
    from shared.metrics import MetricsCollector


DEFAULT_CACHE_TTL_SECONDS = 300

PAGE_CACHE_PREFIX = "users_page_"
USER_CACHE_PREFIX = "user_"

ModelT = TypeVar("ModelT", bound=BaseModel)


class UnsupportedContentTypeError(ValueError):
    """The response body is not declared as JSON."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Unsupported content type: {content_type}")


def decode_body(response: httpx.Response, model: Type[ModelT]) -> Optional[ModelT]:
    """Decode a JSON response body into ``model``.

    A literal ``null`` body decodes to None. Raises
    ``UnsupportedContentTypeError`` when the declared media type is not JSON,
    and ``ValueError`` (including pydantic's ``ValidationError``) when the body
    is malformed or does not match the model.
    """
    content_type = response.headers.get("content-type")
    if content_type:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type != "application/json" and not media_type.endswith("+json"):
            raise UnsupportedContentTypeError(media_type)

    payload = response.json()
    if payload is None:
        return None
    return model.model_validate(payload)


class UserFetchService:
    """Fetches users from the remote directory with a short-lived cache.

    ``fetch_all_users`` never raises for remote failures: every failure
    degrades to an empty list. ``fetch_user_by_id`` returns None on failure
    but raises ``UserNotFoundError`` when the directory answers 404.
    """

    def __init__(
        self,
        client: "ReqResClient",
        cache: CacheBackend,
        *,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.client = client
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds
        self.metrics = metrics
        self.logger = get_logger("users.fetch_service")

    def _record_cache_access(self, cache_type: str, hit: bool) -> None:
        if self.metrics is not None:
            self.metrics.record_cache_access(cache_type, hit)

    def _record_error(self, error_type: str) -> None:
        if self.metrics is not None:
            self.metrics.record_error(error_type)

    async def fetch_all_users(self) -> List[User]:
        """Return every user across all pages, in page order.

        An empty list means either that there are no users or that something
        failed; failures are only visible in the logs. Pages already gathered
        are discarded when a later page fails, including on 404.
        """
        all_users: List[User] = []
        current_page = 1
        total_pages = 1  # raised by the first fetched page

        try:
            while current_page <= total_pages:
                cache_key = f"{PAGE_CACHE_PREFIX}{current_page}"
                users = await self.cache.get(cache_key)

                if users is not None:
                    self._record_cache_access("users_page", hit=True)
                    self.logger.info("Cache hit for users page", page=current_page)
                else:
                    self._record_cache_access("users_page", hit=False)
                    response = await self.client.get("users", params={"page": current_page})

                    if response.status_code == 404:
                        self.logger.warning("Users page not found", page=current_page)
                        return []

                    if not response.is_success:
                        self._record_error("upstream_status")
                        self.logger.warning(
                            "Failed to get users page",
                            page=current_page,
                            status_code=response.status_code,
                        )
                        return []

                    try:
                        user_list = decode_body(response, UserListResponse)
                    except UnsupportedContentTypeError as exc:
                        self._record_error("decode")
                        self.logger.error(
                            "Unsupported content type when decoding users page",
                            page=current_page,
                            content_type=exc.content_type,
                        )
                        return []
                    except ValueError as exc:
                        self._record_error("decode")
                        self.logger.error(
                            "JSON decoding error on users page",
                            page=current_page,
                            error=str(exc),
                        )
                        return []

                    users = tuple(user_list.data) if user_list else ()
                    await self.cache.set(cache_key, users, self.cache_ttl_seconds)

                    if user_list and user_list.total_pages is not None:
                        total_pages = user_list.total_pages
                    else:
                        total_pages = 1

                if not users:
                    self.logger.info("No users found on page", page=current_page)
                    break

                self.logger.info("Fetched users from page", count=len(users), page=current_page)
                all_users.extend(users)
                current_page += 1

        except ExternalServiceTimeoutError as exc:
            self._record_error("timeout")
            self.logger.error("Request timeout when fetching users", page=current_page, error=exc.message)
            return []
        except ExternalServiceError as exc:
            self._record_error("transport")
            self.logger.error("HTTP request error when fetching users", page=current_page, error=exc.message)
            return []

        return all_users

    async def lookup_user(self, user_id: int) -> UserLookup:
        """Look up one user, reporting the outcome instead of raising."""
        cache_key = f"{USER_CACHE_PREFIX}{user_id}"

        cached_user = await self.cache.get(cache_key)
        if cached_user is not None:
            self._record_cache_access("user", hit=True)
            self.logger.debug("Cache hit for user", user_id=user_id)
            return UserLookup.found(user_id, cached_user)
        self._record_cache_access("user", hit=False)

        try:
            response = await self.client.get(f"users/{user_id}")
        except ExternalServiceTimeoutError as exc:
            self._record_error("timeout")
            self.logger.error("Request timeout when fetching user", user_id=user_id, error=exc.message)
            return UserLookup.failed(user_id)
        except ExternalServiceError as exc:
            self._record_error("transport")
            self.logger.error("HTTP request error when fetching user", user_id=user_id, error=exc.message)
            return UserLookup.failed(user_id)

        if response.status_code == 404:
            self.logger.warning("User does not exist", user_id=user_id, status_code=response.status_code)
            return UserLookup.not_found(user_id)

        if not response.is_success:
            self._record_error("upstream_status")
            self.logger.warning("Failed to get user", user_id=user_id, status_code=response.status_code)
            return UserLookup.failed(user_id)

        try:
            user_response = decode_body(response, UserResponse)
        except UnsupportedContentTypeError as exc:
            self._record_error("decode")
            self.logger.error(
                "Unsupported content type when decoding user",
                user_id=user_id,
                content_type=exc.content_type,
            )
            return UserLookup.failed(user_id)
        except ValueError as exc:
            self._record_error("decode")
            self.logger.error("JSON decoding error when reading user", user_id=user_id, error=str(exc))
            return UserLookup.failed(user_id)

        user = user_response.data if user_response else None
        if user is not None:
            await self.cache.set(cache_key, user, self.cache_ttl_seconds)

        return UserLookup.found(user_id, user)

    async def fetch_user_by_id(self, user_id: int) -> Optional[User]:
        """Return the user with ``user_id``, or None if it could not be fetched.

        Raises:
            UserNotFoundError: the remote directory answered 404.
        """
        lookup = await self.lookup_user(user_id)
        if lookup.status is LookupStatus.NOT_FOUND:
            raise UserNotFoundError(user_id)
        return lookup.user
