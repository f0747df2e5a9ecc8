"""
Users service for the ReqRes Access Layer.
"""

from typing import Dict, List, Optional

import httpx
from fastapi import Path, Response

from shared.base_service import BaseService
from shared.config import ReqResSettings, ServiceConfig, get_reqres_settings
from service_users.app.adapters.reqres_client import ReqResClient
from service_users.app.caching import CacheBackend, MemoryCache
from service_users.app.domain.models import User
from service_users.app.domain.user_service import UserFetchService


class UsersService(BaseService):
    """Users service implementation."""

    def __init__(
        self,
        settings: Optional[ReqResSettings] = None,
        *,
        config: Optional[ServiceConfig] = None,
        cache: Optional[CacheBackend] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Settings are loaded before anything else so a bad base URL stops startup.
        self.settings = settings or get_reqres_settings()
        super().__init__("users", 8000, config=config)

        self.reqres_client = ReqResClient.from_settings(
            self.settings,
            transport=transport,
            metrics=self.metrics,
        )
        self.cache = cache or MemoryCache(max_entries=self.settings.cache_max_entries)
        self.user_service = UserFetchService(
            self.reqres_client,
            self.cache,
            cache_ttl_seconds=self.settings.cache_ttl_seconds,
            metrics=self.metrics,
        )

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.reqres_client.close()

        self._setup_users_routes()

    async def _check_dependencies(self) -> Dict[str, str]:
        return {"reqres": self.reqres_client.base_url}

    def _setup_users_routes(self):
        """Set up user directory routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "users",
                "message": "ReqRes Access Layer - Users",
                "version": "1.0.0"
            }

        @self.app.get("/api/users/AllUsers", response_model=List[User])
        async def get_all_users():
            """Every user across all remote pages; empty on failure."""
            return await self.user_service.fetch_all_users()

        @self.app.get(
            "/api/users/details/{user_id}",
            response_model=User,
            responses={204: {"description": "User could not be fetched"}, 404: {"description": "User not found"}},
        )
        async def get_user(user_id: int = Path(..., ge=1)):
            """Details of a single user.

            UserNotFoundError propagates to the shared exception handler,
            which answers 404.
            """
            user = await self.user_service.fetch_user_by_id(user_id)
            if user is None:
                return Response(status_code=204)
            return user


def create_app():
    """Create FastAPI application."""
    service = UsersService()
    return service.app


if __name__ == "__main__":
    service = UsersService()
    service.run()
