from __future__ import annotations

import pytest

from solar_relay.core.errors import BadRequest, Unauthorized, UpstreamError
from solar_relay.models.telemetry import Aggregation, CurrentStatus
from solar_relay.services.telemetry import TelemetryService
from tests.fakes import FakeThingsBoard

AUTH = "Bearer tb-token"


def test_current_status_uses_latest_points(
    telemetry: TelemetryService, upstream: FakeThingsBoard
) -> None:
    upstream.timeseries = {
        "voltage": [{"ts": 1, "value": "11.0"}, {"ts": 2, "value": "12.5"}],
        "current": [{"ts": 2, "value": "2"}],
        "light": [{"ts": 2, "value": "800"}],
        "temperature": [{"ts": 2, "value": "31.25"}],
    }
    status = telemetry.current_status(AUTH)
    assert status == CurrentStatus(voltage=12.5, current=2.0, light=800.0, temperature=31.25)
    assert status.power == 25.0
    assert "startTs" not in upstream.last_params()
    assert upstream.last_params()["keys"] == "voltage,current,light,temperature"


def test_current_status_defaults_missing_sensors_to_zero(
    telemetry: TelemetryService, upstream: FakeThingsBoard
) -> None:
    upstream.timeseries = {"voltage": [{"ts": 1, "value": "garbage"}]}
    assert telemetry.current_status(AUTH) == CurrentStatus(0.0, 0.0, 0.0, 0.0)


def test_missing_auth_header_is_rejected_before_upstream(
    telemetry: TelemetryService, upstream: FakeThingsBoard
) -> None:
    with pytest.raises(Unauthorized):
        telemetry.current_status("")
    with pytest.raises(Unauthorized):
        telemetry.export_csv(None)
    assert upstream.requests == []


def test_upstream_failure_raises(telemetry: TelemetryService, upstream: FakeThingsBoard) -> None:
    upstream.fail_with = 503
    with pytest.raises(UpstreamError) as exc:
        telemetry.current_status(AUTH)
    assert exc.value.status_code == 503


def test_logs_window_defaults(telemetry: TelemetryService) -> None:
    window = telemetry.logs_window(now=10_000_000)
    assert window.end_ts == 10_000_000
    assert window.start_ts == 10_000_000 - 5 * 60 * 1000
    assert window.interval_ms == 60 * 60 * 1000
    assert window.aggregation is Aggregation.AVG


def test_logs_window_zero_interval_uses_default(telemetry: TelemetryService) -> None:
    window = telemetry.logs_window(start_ts=0, end_ts=1000, interval_ms=0)
    assert window.interval_ms == 60 * 60 * 1000


def test_export_window_defaults(telemetry: TelemetryService) -> None:
    window = telemetry.export_window(now=100_000_000)
    assert window.start_ts == 100_000_000 - 24 * 60 * 60 * 1000
    assert window.end_ts == 100_000_000
    assert window.interval_ms == 0
    assert window.aggregation is Aggregation.NONE


def test_window_rejects_reversed_range(telemetry: TelemetryService) -> None:
    with pytest.raises(BadRequest):
        telemetry.logs_window(start_ts=2000, end_ts=1000)


def test_avg_export_requires_interval(telemetry: TelemetryService) -> None:
    with pytest.raises(BadRequest):
        telemetry.export_window(start_ts=0, end_ts=1000, aggregation=Aggregation.AVG)
    window = telemetry.export_window(
        start_ts=0, end_ts=1000, aggregation=Aggregation.AVG, interval_ms=500
    )
    assert window.interval_ms == 500


def test_export_rejects_other_aggregations(telemetry: TelemetryService) -> None:
    with pytest.raises(BadRequest):
        telemetry.export_window(aggregation=Aggregation.MAX, interval_ms=1000)


def test_logs_sends_ranged_query(telemetry: TelemetryService, upstream: FakeThingsBoard) -> None:
    upstream.timeseries = {"voltage": [{"ts": 1500, "value": "12"}, {"ts": 5000, "value": "13"}]}
    series = telemetry.logs(AUTH, start_ts=1000, end_ts=2000, interval_ms=100)
    assert [p.ts for p in series["voltage"]] == [1500]
    params = upstream.last_params()
    assert params["startTs"] == "1000"
    assert params["endTs"] == "2000"
    assert params["interval"] == "100"
    assert params["agg"] == "AVG"
    assert params["useStrictDataTypes"] == "false"


def test_export_csv_counts_rows(telemetry: TelemetryService, upstream: FakeThingsBoard) -> None:
    upstream.timeseries = {
        "voltage": [{"ts": 1000, "value": "12.345"}],
        "current": [{"ts": 1000, "value": 5}, {"ts": 2000, "value": 6}],
    }
    export = telemetry.export_csv(AUTH, start_ts=0, end_ts=10_000)
    assert export.row_count == 2
    assert export.filename.startswith("solar-logs-") and export.filename.endswith(".csv")
    assert export.content.splitlines()[1] == '"1970-01-01 00:00:01","12.345","5.000","",""'
    assert upstream.last_params()["agg"] == "NONE"
    assert upstream.last_params()["interval"] == "0"


def test_day_bounds(telemetry: TelemetryService) -> None:
    start, end = telemetry.day_bounds("2025-01-02")
    assert start == 1735776000000
    assert end == start + 24 * 60 * 60 * 1000 - 1
