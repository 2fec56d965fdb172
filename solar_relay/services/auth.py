from __future__ import annotations

import logging

from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.config import Settings
from solar_relay.core.errors import UpstreamError
from solar_relay.models.telemetry import AuthFailure, AuthResult, AuthSuccess, Credential

logger = logging.getLogger(__name__)


class AuthTokenProvider:
    """Exchanges username/password for an upstream bearer token.

    Failures are reported as ``AuthFailure`` values rather than raised. Nothing
    is cached; every call performs a fresh login.
    """

    def __init__(self, *, client: ThingsBoardClient, settings: Settings) -> None:
        self._client = client
        self._username = settings.tb_username
        self._password = settings.tb_password

    def obtain_token(self) -> AuthResult:
        return self.authenticate(username=self._username, password=self._password)

    def authenticate(self, *, username: str, password: str) -> AuthResult:
        try:
            payload = self._client.login(username=username, password=password)
        except UpstreamError as e:
            logger.warning("Login failed for %r: %s", username, e.message)
            return AuthFailure(reason=e.message)

        token = payload.get("token")
        if not isinstance(token, str) or not token:
            logger.warning("Login response for %r carried no token", username)
            return AuthFailure(reason="Login response carried no token")

        refresh_token = payload.get("refreshToken")
        return AuthSuccess(
            credential=Credential(
                token=token,
                refresh_token=refresh_token if isinstance(refresh_token, str) else "",
            )
        )
