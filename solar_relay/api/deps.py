from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.config import Settings
from solar_relay.services.auth import AuthTokenProvider
from solar_relay.services.relay import RelayController
from solar_relay.services.telemetry import TelemetryService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_thingsboard_client(request: Request) -> ThingsBoardClient:
    return request.app.state.thingsboard_client


def get_auth_provider(
    client: Annotated[ThingsBoardClient, Depends(get_thingsboard_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthTokenProvider:
    return AuthTokenProvider(client=client, settings=settings)


def get_telemetry_service(
    client: Annotated[ThingsBoardClient, Depends(get_thingsboard_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TelemetryService:
    return TelemetryService(client=client, settings=settings)


def get_relay_controller(
    client: Annotated[ThingsBoardClient, Depends(get_thingsboard_client)],
) -> RelayController:
    return RelayController(client=client)


def get_auth_header(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """The inbound ``Authorization`` header, forwarded upstream as-is."""
    if not authorization or not authorization.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization


AuthHeader = Annotated[str, Depends(get_auth_header)]
