"""Cookie session handling for the eModul backend."""

from __future__ import annotations

import logging

import httpx

from . import api
from .exceptions import VeranoAuthError, VeranoTransportError
from .models import Credentials

_LOGGER = logging.getLogger(__name__)


class VeranoSession:
    """Own the eModul session cookie and its authorized status.

    The session starts unauthenticated, becomes authorized after a
    successful login and drops back to unauthenticated whenever a request
    is rejected with 401/403.
    """

    def __init__(self, http: httpx.AsyncClient, credentials: Credentials) -> None:
        """Initialize the session.

        Args:
            http: HTTP client session.
            credentials: Account credentials, validated on construction.

        """
        self._http = http
        self._credentials = credentials
        self._cookie = ""
        self._authorized = False

    @property
    def cookie(self) -> str:
        """Return the last session cookie, even if no longer authorized."""
        return self._cookie

    @property
    def authorized(self) -> bool:
        """Return True while the stored cookie is believed valid."""
        return self._authorized

    @property
    def http(self) -> httpx.AsyncClient:
        """Return the HTTP client used for all requests."""
        return self._http

    async def async_ensure_session(self) -> None:
        """Log in unless an authorized cookie is already held."""
        if self._authorized and self._cookie:
            return
        await self.async_authorize()

    async def async_authorize(self) -> None:
        """Log in and store the session cookie.

        Raises:
            VeranoAuthError: If the login was rejected or set no cookie.
            VeranoTransportError: If the backend could not be reached.

        """
        self._authorized = False
        _LOGGER.info("Authorizing with eModul as %s", self._credentials.username)
        try:
            cookie = await api.async_login(self._http, self._credentials)
        except VeranoAuthError:
            _LOGGER.warning("eModul rejected the login for %s", self._credentials.username)
            raise
        except httpx.RequestError as err:
            error_msg = f"Connection error during login: {err}"
            raise VeranoTransportError(error_msg) from err

        self._cookie = cookie
        self._authorized = True
        _LOGGER.info("Successfully authorized with eModul")

    def invalidate(self) -> None:
        """Mark the session unauthenticated; the cookie is kept until replaced."""
        if self._authorized:
            _LOGGER.debug("Invalidating eModul session")
        self._authorized = False
