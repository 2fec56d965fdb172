from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from solar_relay.api.deps import AuthHeader, get_auth_provider, get_thingsboard_client
from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.errors import UpstreamError
from solar_relay.models.telemetry import AuthFailure
from solar_relay.schemas.auth import LoginRequest, Token
from solar_relay.services.auth import AuthTokenProvider

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=Token)
def login(
    response: Response,
    payload: LoginRequest,
    provider: Annotated[AuthTokenProvider, Depends(get_auth_provider)],
) -> Token:
    result = provider.authenticate(username=payload.username, password=payload.password)
    if isinstance(result, AuthFailure):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return Token(
        token=result.credential.token, refresh_token=result.credential.refresh_token
    )


@router.get("/profile")
def read_profile(
    auth_header: AuthHeader,
    client: Annotated[ThingsBoardClient, Depends(get_thingsboard_client)],
) -> dict[str, Any]:
    scheme, _, token = auth_header.strip().partition(" ")
    if scheme.lower() != "bearer":
        token = auth_header
    token = token.strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return client.get_user(f"Bearer {token}")
    except UpstreamError as e:
        if e.status_code == status.HTTP_401_UNAUTHORIZED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
            ) from e
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch profile",
        ) from e


@router.get("/logout")
def logout(response: Response) -> dict[str, bool]:
    # Tokens live client-side; there is no upstream session to revoke.
    response.headers["Cache-Control"] = "no-store"
    return {"success": True}
