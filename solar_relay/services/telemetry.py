from __future__ import annotations

import math
import time
from datetime import datetime, timedelta

from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.config import Settings
from solar_relay.core.errors import BadRequest, Unauthorized
from solar_relay.models.telemetry import (
    TELEMETRY_KEYS,
    Aggregation,
    CsvExport,
    CurrentStatus,
    QueryWindow,
    TimeSeriesPoint,
    TimeSeriesResponse,
)
from solar_relay.services.csv_export import merge_series, rows_to_csv


def now_ms() -> int:
    return int(time.time() * 1000)


def build_window(
    *,
    start_ts: int,
    end_ts: int,
    interval_ms: int = 0,
    aggregation: Aggregation = Aggregation.NONE,
) -> QueryWindow:
    if start_ts > end_ts:
        raise BadRequest("'startTs' must be <= 'endTs'")
    if interval_ms < 0:
        raise BadRequest("'interval' must be >= 0")
    if aggregation is not Aggregation.NONE and interval_ms < 1:
        raise BadRequest(f"'interval' is required for {aggregation.value} aggregation")
    return QueryWindow(
        start_ts=start_ts, end_ts=end_ts, interval_ms=interval_ms, aggregation=aggregation
    )


def _require_auth(auth_header: str | None) -> str:
    if not auth_header or not auth_header.strip():
        raise Unauthorized()
    return auth_header


def _latest_value(points: list[TimeSeriesPoint] | None) -> float:
    if not points:
        return 0.0
    try:
        value = float(points[0].value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


class TelemetryService:
    def __init__(self, *, client: ThingsBoardClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def fetch_series(
        self,
        auth_header: str | None,
        *,
        keys: tuple[str, ...] = TELEMETRY_KEYS,
        window: QueryWindow | None = None,
    ) -> TimeSeriesResponse:
        return self._client.get_timeseries(_require_auth(auth_header), keys=keys, window=window)

    def current_status(self, auth_header: str | None) -> CurrentStatus:
        series = self.fetch_series(auth_header)
        return CurrentStatus(**{key: _latest_value(series.get(key)) for key in TELEMETRY_KEYS})

    def logs_window(
        self,
        *,
        start_ts: int | None = None,
        end_ts: int | None = None,
        interval_ms: int | None = None,
        now: int | None = None,
    ) -> QueryWindow:
        now = now_ms() if now is None else now
        if start_ts is None:
            start_ts = now - self._settings.logs_default_window_seconds * 1000
        if not interval_ms:
            interval_ms = self._settings.logs_default_interval_ms
        return build_window(
            start_ts=start_ts,
            end_ts=end_ts if end_ts is not None else now,
            interval_ms=interval_ms,
            aggregation=Aggregation.AVG,
        )

    def export_window(
        self,
        *,
        start_ts: int | None = None,
        end_ts: int | None = None,
        aggregation: Aggregation = Aggregation.NONE,
        interval_ms: int | None = None,
        now: int | None = None,
    ) -> QueryWindow:
        if aggregation not in (Aggregation.NONE, Aggregation.AVG):
            raise BadRequest("Export supports only NONE or AVG aggregation")
        now = now_ms() if now is None else now
        if start_ts is None:
            start_ts = now - self._settings.export_default_window_seconds * 1000
        return build_window(
            start_ts=start_ts,
            end_ts=end_ts if end_ts is not None else now,
            interval_ms=interval_ms if interval_ms is not None else 0,
            aggregation=aggregation,
        )

    def logs(
        self,
        auth_header: str | None,
        *,
        start_ts: int | None = None,
        end_ts: int | None = None,
        interval_ms: int | None = None,
    ) -> TimeSeriesResponse:
        _require_auth(auth_header)
        window = self.logs_window(start_ts=start_ts, end_ts=end_ts, interval_ms=interval_ms)
        return self.fetch_series(auth_header, window=window)

    def export_csv(
        self,
        auth_header: str | None,
        *,
        start_ts: int | None = None,
        end_ts: int | None = None,
        aggregation: Aggregation = Aggregation.NONE,
        interval_ms: int | None = None,
        filename: str | None = None,
    ) -> CsvExport:
        _require_auth(auth_header)
        window = self.export_window(
            start_ts=start_ts, end_ts=end_ts, aggregation=aggregation, interval_ms=interval_ms
        )
        rows = merge_series(self.fetch_series(auth_header, window=window), self._settings.tz)
        return CsvExport(
            filename=filename or f"solar-logs-{now_ms()}.csv",
            content=rows_to_csv(rows),
            row_count=len(rows),
        )

    def day_bounds(self, day: str) -> tuple[int, int]:
        """Start and end of a ``YYYY-MM-DD`` day in the display timezone, in millis."""
        tz = self._settings.tz
        start = datetime.strptime(day, "%Y-%m-%d")
        following = start + timedelta(days=1)
        start_ms = int(start.replace(tzinfo=tz).timestamp()) * 1000
        following_ms = int(following.replace(tzinfo=tz).timestamp()) * 1000
        return start_ms, following_ms - 1
