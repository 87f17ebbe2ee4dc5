"""Tests for the eModul session handling."""

from unittest.mock import Mock

import httpx
import pytest
from pytest_httpx import HTTPXMock

from custom_components.verano.const import LOGIN_URL
from custom_components.verano.exceptions import (
    VeranoAuthError,
    VeranoTransportError,
)
from custom_components.verano.models import Credentials
from custom_components.verano.session import VeranoSession


class TestVeranoSessionInit:
    """Tests for VeranoSession initialization."""

    def test_init_starts_unauthenticated(self, credentials: Credentials) -> None:
        """Test that a new session holds no cookie and is not authorized."""
        session = VeranoSession(Mock(spec=httpx.AsyncClient), credentials)
        assert session.authorized is False
        assert session.cookie == ""


class TestVeranoSessionAuthorize:
    """Tests for async_authorize method."""

    @pytest.mark.asyncio
    async def test_async_authorize_stores_cookie(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
        login_headers: dict[str, str],
    ) -> None:
        """Test that a successful login stores the cookie pair."""
        httpx_mock.add_response(url=LOGIN_URL, method="POST", headers=login_headers)
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            await session.async_authorize()
        assert session.authorized is True
        assert session.cookie == "session=abc123"

    @pytest.mark.asyncio
    async def test_async_authorize_raises_auth_error_on_rejection(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
    ) -> None:
        """Test that a rejected login leaves the session unauthenticated."""
        httpx_mock.add_response(url=LOGIN_URL, method="POST", status_code=403)
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            with pytest.raises(VeranoAuthError):
                await session.async_authorize()
        assert session.authorized is False

    @pytest.mark.asyncio
    async def test_async_authorize_raises_auth_error_without_cookie(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
    ) -> None:
        """Test that a login without session cookie is rejected."""
        httpx_mock.add_response(
            url=LOGIN_URL,
            method="POST",
            headers={"set-cookie": "lang=en; Path=/"},
        )
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            with pytest.raises(VeranoAuthError):
                await session.async_authorize()
        assert session.authorized is False

    @pytest.mark.asyncio
    async def test_async_authorize_raises_transport_error_on_connection_error(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
    ) -> None:
        """Test that connection failures during login are transport errors."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            with pytest.raises(VeranoTransportError, match="Connection refused"):
                await session.async_authorize()
        assert session.authorized is False


class TestVeranoSessionEnsureSession:
    """Tests for async_ensure_session method."""

    @pytest.mark.asyncio
    async def test_async_ensure_session_logs_in_when_unauthenticated(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
        login_headers: dict[str, str],
    ) -> None:
        """Test that ensure_session logs in on first use."""
        httpx_mock.add_response(url=LOGIN_URL, method="POST", headers=login_headers)
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            await session.async_ensure_session()
        assert session.authorized is True

    @pytest.mark.asyncio
    async def test_async_ensure_session_is_noop_when_authorized(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
        login_headers: dict[str, str],
    ) -> None:
        """Test that ensure_session does not log in twice."""
        httpx_mock.add_response(url=LOGIN_URL, method="POST", headers=login_headers)
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            await session.async_ensure_session()
            await session.async_ensure_session()
        assert len(httpx_mock.get_requests(url=LOGIN_URL)) == 1


class TestVeranoSessionInvalidate:
    """Tests for invalidate method."""

    @pytest.mark.asyncio
    async def test_invalidate_keeps_cookie(
        self,
        httpx_mock: HTTPXMock,
        credentials: Credentials,
        login_headers: dict[str, str],
    ) -> None:
        """Test that invalidate marks unauthenticated but keeps the cookie."""
        httpx_mock.add_response(url=LOGIN_URL, method="POST", headers=login_headers)
        async with httpx.AsyncClient() as http:
            session = VeranoSession(http, credentials)
            await session.async_authorize()
            session.invalidate()
        assert session.authorized is False
        assert session.cookie == "session=abc123"
