"""
Unit tests for the Users main service.
"""

import pytest
import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from service_users.app.main import UsersService, create_app
from shared.config import ReqResSettings
from shared.errors import ConfigurationError
from shared.test_helpers import (
    DEFAULT_BASE_URL,
    FakeReqResDirectory,
    UserDataFactory,
    json_response,
    undecodable_response,
)


class TestUsersService:
    """Test cases for UsersService."""

    @pytest.fixture
    def directory(self):
        return FakeReqResDirectory()

    @pytest.fixture
    def settings(self):
        return ReqResSettings(base_url=DEFAULT_BASE_URL, api_key="reqres-free-v1", retry_delay_seconds=0)

    @pytest.fixture
    def users_service(self, settings, directory):
        """Create UsersService instance against the scripted directory."""
        return UsersService(settings, transport=directory.transport)

    @pytest.fixture
    def client(self, users_service):
        """Create test client."""
        with TestClient(users_service.app) as client:
            yield client

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "users"
        assert data["message"] == "ReqRes Access Layer - Users"

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "users"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"reqres": DEFAULT_BASE_URL}

    def test_all_users(self, client, directory):
        directory.add("users?page=1", UserDataFactory.page([{"id": 1, "first_name": "George"}], page=1, total_pages=2))
        directory.add("users?page=2", UserDataFactory.page([{"id": 2, "last_name": "Janet"}], page=2, total_pages=2))

        response = client.get("/api/users/AllUsers")

        assert response.status_code == 200
        data = response.json()
        assert [user["id"] for user in data] == [1, 2]
        assert data[0]["first_name"] == "George"
        assert data[1]["last_name"] == "Janet"
        assert data[1]["email"] is None

    def test_all_users_failure_is_empty_list(self, client, directory):
        directory.add("users?page=1", json_response(500, {}))

        response = client.get("/api/users/AllUsers")

        assert response.status_code == 200
        assert response.json() == []

    def test_user_details(self, client, directory):
        directory.add("users/2", UserDataFactory.single(UserDataFactory.user(2, first_name="Janet")))

        response = client.get("/api/users/details/2")

        assert response.status_code == 200
        assert response.json()["first_name"] == "Janet"
        assert directory.requests[0].headers["x-api-key"] == "reqres-free-v1"

    def test_user_details_not_found(self, client):
        response = client.get("/api/users/details/42", headers={"x-request-id": "req-42"})

        assert response.status_code == 404
        assert response.headers["x-request-id"] == "req-42"
        data = response.json()
        assert data["code"] == "USER_NOT_FOUND"
        assert data["message"] == "User with ID 42 was not found."
        assert data["details"] == {"user_id": 42}

    def test_user_details_unavailable(self, client, directory):
        """A failed lookup answers 204 with no body."""
        directory.add("users/3", httpx.ConnectError("connection refused"))

        response = client.get("/api/users/details/3")

        assert response.status_code == 204
        assert response.content == b""

    def test_undecodable_bodies_do_not_fail_routes(self, client, directory):
        directory.add("users?page=1", undecodable_response())
        directory.add("users/4", undecodable_response())

        listing = client.get("/api/users/AllUsers")
        details = client.get("/api/users/details/4")

        assert listing.status_code == 200
        assert listing.json() == []
        assert details.status_code == 204

    def test_user_details_rejects_invalid_id(self, client, directory):
        response = client.get("/api/users/details/0")

        assert response.status_code == 422
        assert directory.requests == []

    def test_metrics_endpoint(self, client, directory):
        directory.add("users/1", UserDataFactory.single(UserDataFactory.user(1)))
        client.get("/api/users/details/1")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "upstream_requests_total" in response.text
        assert "cache_misses_total" in response.text

    def test_request_id_generated(self, client):
        response = client.get("/")

        assert response.headers["x-request-id"]

    def test_shutdown_closes_client(self, users_service):
        with TestClient(users_service.app):
            pass

        assert users_service.reqres_client._client.is_closed


class TestCreateApp:
    """Test cases for the application factory."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        monkeypatch.delenv("REQRES_BASE_URL", raising=False)
        monkeypatch.chdir(tmp_path)

    def test_create_app(self, monkeypatch):
        monkeypatch.setenv("REQRES_BASE_URL", "https://reqres.in/api/")

        app = create_app()

        assert isinstance(app, FastAPI)

    def test_create_app_without_base_url(self):
        with pytest.raises(ConfigurationError):
            create_app()
