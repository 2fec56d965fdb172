from __future__ import annotations

import csv
import io
import math
from datetime import datetime, tzinfo

from solar_relay.models.telemetry import TELEMETRY_KEYS, MergedRow, TimeSeriesResponse

CSV_HEADER: tuple[str, ...] = (
    "Timestamp",
    "Voltage (V)",
    "Current (A)",
    "Light (lux)",
    "Temperature (°C)",
)
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(ts_ms: int, tz: tzinfo) -> str:
    return datetime.fromtimestamp(ts_ms / 1000, tz=tz).strftime(TIMESTAMP_FORMAT)


def format_value(value: object) -> str:
    """Three decimals for anything numeric, the raw text otherwise."""
    if isinstance(value, bool):
        return str(value).lower()
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return "" if value is None else str(value)
    if not math.isfinite(number):
        return str(value)
    return f"{number:.3f}"


def merge_series(response: TimeSeriesResponse, tz: tzinfo) -> list[MergedRow]:
    rows: dict[int, MergedRow] = {}
    for key in TELEMETRY_KEYS:
        for point in response.get(key) or []:
            row = rows.get(point.ts)
            if row is None:
                row = MergedRow(ts=point.ts, formatted_timestamp=format_timestamp(point.ts, tz))
                rows[point.ts] = row
            setattr(row, key, format_value(point.value))
    return sorted(rows.values(), key=lambda r: r.ts)


def rows_to_csv(rows: list[MergedRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(
            (row.formatted_timestamp, row.voltage, row.current, row.light, row.temperature)
        )
    return buf.getvalue().rstrip("\n")


def to_csv(response: TimeSeriesResponse, tz: tzinfo) -> str:
    return rows_to_csv(merge_series(response, tz))
