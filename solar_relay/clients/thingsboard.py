from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from solar_relay.core.errors import UpstreamError
from solar_relay.models.telemetry import QueryWindow, TimeSeriesPoint, TimeSeriesResponse

logger = logging.getLogger(__name__)

SHARED_SCOPE = "SHARED_SCOPE"


def _upstream_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return resp.reason_phrase


class ThingsBoardClient:
    """Blocking client for the subset of the ThingsBoard REST API the relay uses.

    Authorization headers are passed through verbatim so inbound dashboard
    requests and bot sessions can share one pooled connection.
    """

    def __init__(
        self,
        *,
        base_url: str,
        device_id: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._device_id = device_id
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def device_id(self) -> str:
        return self._device_id

    def close(self) -> None:
        self._client.close()

    def login(self, *, username: str, password: str) -> dict[str, Any]:
        resp = self._send(
            "POST",
            "/auth/login",
            json={"username": username, "password": password},
            what="authenticate",
        )
        return self._json_object(resp, what="authenticate")

    def get_user(self, auth_header: str) -> dict[str, Any]:
        resp = self._send(
            "GET", "/auth/user", headers={"Authorization": auth_header}, what="fetch profile"
        )
        return self._json_object(resp, what="fetch profile")

    def get_timeseries(
        self,
        auth_header: str,
        *,
        keys: Iterable[str],
        window: QueryWindow | None = None,
    ) -> TimeSeriesResponse:
        params: dict[str, Any] = {"keys": ",".join(keys)}
        if window is not None:
            params.update(
                {
                    "startTs": window.start_ts,
                    "endTs": window.end_ts,
                    "interval": window.interval_ms,
                    "agg": window.aggregation.value,
                }
            )
        params["useStrictDataTypes"] = "false"

        resp = self._send(
            "GET",
            f"/plugins/telemetry/DEVICE/{self._device_id}/values/timeseries",
            headers={"Authorization": auth_header},
            params=params,
            what="fetch telemetry",
        )
        if resp.status_code != 200:
            raise UpstreamError("Failed to fetch device telemetry", status_code=resp.status_code)
        return _parse_timeseries(self._json_object(resp, what="fetch telemetry"))

    def get_shared_attributes(self, auth_header: str, *, keys: Iterable[str]) -> list[dict[str, Any]]:
        resp = self._send(
            "GET",
            f"/plugins/telemetry/DEVICE/{self._device_id}/values/attributes/{SHARED_SCOPE}",
            headers={"Authorization": auth_header},
            params={"keys": ",".join(keys)},
            what="fetch device attributes",
        )
        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamError("Unexpected attributes response shape") from e
        if not isinstance(payload, list):
            raise UpstreamError("Unexpected attributes response shape")
        return [item for item in payload if isinstance(item, dict)]

    def save_shared_attributes(self, auth_header: str, attributes: dict[str, Any]) -> None:
        self._send(
            "POST",
            f"/plugins/telemetry/DEVICE/{self._device_id}/attributes/{SHARED_SCOPE}",
            headers={"Authorization": auth_header},
            json=attributes,
            what="update device attributes",
        )

    def _send(self, method: str, url: str, *, what: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Upstream request failed (%s): %s", what, e)
            raise UpstreamError(f"Failed to {what}") from e

        if resp.is_error:
            logger.error(
                "Upstream returned %s (%s): %s", resp.status_code, what, _upstream_message(resp)
            )
            raise UpstreamError(f"Failed to {what}", status_code=resp.status_code)
        return resp

    @staticmethod
    def _json_object(resp: httpx.Response, *, what: str) -> dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError as e:
            raise UpstreamError(f"Failed to {what}: response was not JSON") from e
        if not isinstance(payload, dict):
            raise UpstreamError(f"Failed to {what}: unexpected response shape")
        return payload


def _parse_timeseries(payload: dict[str, Any]) -> TimeSeriesResponse:
    series: TimeSeriesResponse = {}
    for key, entries in payload.items():
        if not isinstance(entries, list):
            continue
        points: list[TimeSeriesPoint] = []
        for entry in entries:
            if not isinstance(entry, dict) or "ts" not in entry:
                continue
            try:
                ts = int(entry["ts"])
            except (TypeError, ValueError):
                continue
            value = entry.get("value")
            points.append(TimeSeriesPoint(ts=ts, value="" if value is None else value))
        series[key] = points
    return series
