from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from solar_relay.api.deps import AuthHeader, get_telemetry_service
from solar_relay.core.errors import BadRequest, UpstreamError
from solar_relay.models.telemetry import Aggregation
from solar_relay.schemas.telemetry import CurrentStatusRead, TimeSeriesPointRead
from solar_relay.services.telemetry import TelemetryService

router = APIRouter()

StartTs = Annotated[int | None, Query(alias="startTs", ge=0)]
EndTs = Annotated[int | None, Query(alias="endTs", ge=0)]
IntervalMs = Annotated[int | None, Query(alias="interval", ge=0)]


@router.get("/current", response_model=CurrentStatusRead)
def current_status(
    auth_header: AuthHeader,
    service: Annotated[TelemetryService, Depends(get_telemetry_service)],
) -> CurrentStatusRead:
    try:
        reading = service.current_status(auth_header)
    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch device telemetry",
        ) from e
    return CurrentStatusRead.model_validate(reading.__dict__)


@router.get("/logs", response_model=dict[str, list[TimeSeriesPointRead]])
def logs(
    auth_header: AuthHeader,
    service: Annotated[TelemetryService, Depends(get_telemetry_service)],
    start_ts: StartTs = None,
    end_ts: EndTs = None,
    interval: IntervalMs = None,
) -> dict[str, list[TimeSeriesPointRead]]:
    try:
        series = service.logs(
            auth_header, start_ts=start_ts, end_ts=end_ts, interval_ms=interval
        )
    except BadRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch device telemetry",
        ) from e
    return {
        key: [TimeSeriesPointRead(ts=p.ts, value=p.value) for p in points]
        for key, points in series.items()
    }


@router.get("/export", response_class=Response)
def export_csv(
    auth_header: AuthHeader,
    service: Annotated[TelemetryService, Depends(get_telemetry_service)],
    start_ts: StartTs = None,
    end_ts: EndTs = None,
    agg: Annotated[Aggregation, Query()] = Aggregation.NONE,
    interval: IntervalMs = None,
) -> Response:
    try:
        export = service.export_csv(
            auth_header,
            start_ts=start_ts,
            end_ts=end_ts,
            aggregation=agg,
            interval_ms=interval,
        )
    except BadRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except UpstreamError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export logs to CSV",
        ) from e
    return Response(
        content=export.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
