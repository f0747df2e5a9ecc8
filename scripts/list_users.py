#!/usr/bin/env python3
"""
Print users from the remote ReqRes directory.

Runs the same fetch service the Users API uses, outside the web service, so a
developer can check connectivity, API key and pagination from a terminal.
Connection settings come from the REQRES_* environment variables unless
overridden on the command line.
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, Optional

from shared.config import get_reqres_settings
from shared.errors import ConfigurationError, UserNotFoundError
from shared.logging import configure_logging
from service_users.app.adapters.reqres_client import ReqResClient
from service_users.app.caching import MemoryCache
from service_users.app.domain.models import User
from service_users.app.domain.user_service import UserFetchService


def format_user(user: User) -> str:
    return f"{user.id}: {user.first_name}-{user.last_name}-{user.email}"


async def run(overrides: Dict[str, Any], user_id: Optional[int]) -> int:
    """Fetch and print users; returns the process exit code."""
    settings = get_reqres_settings(**overrides)

    async with ReqResClient.from_settings(settings) as client:
        service = UserFetchService(
            client,
            MemoryCache(max_entries=settings.cache_max_entries),
            cache_ttl_seconds=settings.cache_ttl_seconds,
        )

        if user_id is not None:
            try:
                user = await service.fetch_user_by_id(user_id)
            except UserNotFoundError as exc:
                print(exc.message)
                return 0
            print(format_user(user) if user else f"User {user_id} could not be fetched.")
            return 0

        users = await service.fetch_all_users()

    if not users:
        print("No users found.")
        return 0

    for user in users:
        print(format_user(user))
    return 0


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List users from the ReqRes directory.")
    parser.add_argument("--base-url", default=None, help="Directory base URL (default: REQRES_BASE_URL)")
    parser.add_argument("--api-key", default=None, help="Value for the x-api-key header (default: REQRES_API_KEY)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--user-id", type=int, default=None, help="Print a single user instead of all users")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level for diagnostics on stdout",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    configure_logging("users-cli", args.log_level)

    overrides: Dict[str, Any] = {}
    if args.base_url is not None:
        overrides["base_url"] = args.base_url
    if args.api_key is not None:
        overrides["api_key"] = args.api_key
    if args.timeout is not None:
        overrides["timeout_seconds"] = args.timeout

    try:
        return asyncio.run(run(overrides, args.user_id))
    except KeyboardInterrupt:
        return 130
    except ConfigurationError as exc:
        print(f"[list-users] {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
