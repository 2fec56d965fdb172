from __future__ import annotations

from pydantic import BaseModel, Field


class CurrentStatusRead(BaseModel):
    voltage: float = 0.0
    current: float = 0.0
    light: float = 0.0
    temperature: float = 0.0


class TimeSeriesPointRead(BaseModel):
    ts: int
    value: str | float | int


class RelayRead(BaseModel):
    relay: bool


class RelayUpdate(BaseModel):
    relay: bool


class RelayUpdateResponse(BaseModel):
    success: bool
    message: str = Field(default="Device attributes updated successfully")
