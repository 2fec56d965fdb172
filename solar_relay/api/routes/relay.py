from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from solar_relay.api.deps import AuthHeader, get_relay_controller
from solar_relay.core.errors import UpstreamError
from solar_relay.schemas.telemetry import RelayRead, RelayUpdate, RelayUpdateResponse
from solar_relay.services.relay import RelayController

router = APIRouter(prefix="/relay")


@router.get("", response_model=RelayRead)
def read_relay(
    auth_header: AuthHeader,
    controller: Annotated[RelayController, Depends(get_relay_controller)],
) -> RelayRead:
    try:
        state = controller.get_relay(auth_header)
    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch device attributes",
        ) from e
    return RelayRead(relay=state.relay)


@router.post("", response_model=RelayUpdateResponse)
def update_relay(
    auth_header: AuthHeader,
    payload: RelayUpdate,
    controller: Annotated[RelayController, Depends(get_relay_controller)],
) -> RelayUpdateResponse:
    try:
        success = controller.set_relay(auth_header, payload.relay)
    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update device attributes",
        ) from e
    return RelayUpdateResponse(success=success)
