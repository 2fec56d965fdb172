from __future__ import annotations

import httpx
import pytest

from solar_relay.bot.application import build_application
from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.config import Settings
from solar_relay.core.errors import UpstreamError
from solar_relay.models.telemetry import Aggregation, QueryWindow
from tests.fakes import BASE_URL, DEVICE_ID


def _client(handler) -> ThingsBoardClient:
    return ThingsBoardClient(
        base_url=BASE_URL,
        device_id=DEVICE_ID,
        timeout_seconds=1.0,
        transport=httpx.MockTransport(handler),
    )


def test_transport_error_becomes_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(UpstreamError) as exc:
        client.get_timeseries("Bearer t", keys=["voltage"])
    assert exc.value.status_code is None


def test_timeseries_query_and_parsing() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "voltage": [{"ts": 1000, "value": "12.1"}, {"ts": "bad"}, {"value": 3}],
                "current": [{"ts": 1000, "value": None}],
                "meta": "ignored",
            },
        )

    client = _client(handler)
    series = client.get_timeseries(
        "Bearer t",
        keys=["voltage", "current"],
        window=QueryWindow(start_ts=1, end_ts=2, interval_ms=3, aggregation=Aggregation.AVG),
    )

    request = seen[0]
    assert request.url.path == f"/api/plugins/telemetry/DEVICE/{DEVICE_ID}/values/timeseries"
    assert request.headers["Authorization"] == "Bearer t"
    assert dict(request.url.params) == {
        "keys": "voltage,current",
        "startTs": "1",
        "endTs": "2",
        "interval": "3",
        "agg": "AVG",
        "useStrictDataTypes": "false",
    }
    assert [(p.ts, p.value) for p in series["voltage"]] == [(1000, "12.1")]
    assert [(p.ts, p.value) for p in series["current"]] == [(1000, "")]
    assert "meta" not in series


def test_non_200_success_status_is_rejected_for_timeseries() -> None:
    client = _client(lambda request: httpx.Response(204))
    with pytest.raises(UpstreamError):
        client.get_timeseries("Bearer t", keys=["voltage"])


def test_unexpected_attributes_shape() -> None:
    client = _client(lambda request: httpx.Response(200, json={"relay": True}))
    with pytest.raises(UpstreamError):
        client.get_shared_attributes("Bearer t", keys=["relay"])


def test_bot_requires_token(settings: Settings) -> None:
    client = _client(lambda request: httpx.Response(200))
    with pytest.raises(RuntimeError, match="TELEGRAM_BOT_TOKEN"):
        build_application(settings, client)
