from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

TELEMETRY_KEYS: tuple[str, ...] = ("voltage", "current", "light", "temperature")


class Aggregation(str, Enum):
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"
    SUM = "SUM"
    COUNT = "COUNT"
    NONE = "NONE"


@dataclass(frozen=True)
class TimeSeriesPoint:
    ts: int
    value: str | float | int


TimeSeriesResponse = dict[str, list[TimeSeriesPoint]]


@dataclass(frozen=True)
class QueryWindow:
    start_ts: int
    end_ts: int
    interval_ms: int = 0
    aggregation: Aggregation = Aggregation.NONE


@dataclass
class MergedRow:
    ts: int
    formatted_timestamp: str
    voltage: str = ""
    current: str = ""
    light: str = ""
    temperature: str = ""


@dataclass(frozen=True)
class CurrentStatus:
    voltage: float = 0.0
    current: float = 0.0
    light: float = 0.0
    temperature: float = 0.0

    @property
    def power(self) -> float:
        return self.voltage * self.current


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str
    row_count: int


@dataclass(frozen=True)
class RelayState:
    relay: bool


@dataclass(frozen=True)
class Credential:
    token: str
    refresh_token: str

    @property
    def auth_header(self) -> str:
        return f"Bearer {self.token}"


@dataclass(frozen=True)
class AuthSuccess:
    credential: Credential


@dataclass(frozen=True)
class AuthFailure:
    reason: str


AuthResult = Union[AuthSuccess, AuthFailure]
