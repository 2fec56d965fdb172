from __future__ import annotations

import logging
from typing import Any

from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.errors import Unauthorized
from solar_relay.models.telemetry import RelayState

logger = logging.getLogger(__name__)

RELAY_KEY = "relay"


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "on"}
    return bool(value)


class RelayController:
    def __init__(self, *, client: ThingsBoardClient) -> None:
        self._client = client

    def get_relay(self, auth_header: str | None) -> RelayState:
        if not auth_header:
            raise Unauthorized()
        attributes = self._client.get_shared_attributes(auth_header, keys=[RELAY_KEY])
        if not attributes:
            logger.info("Relay attribute not set on device %s", self._client.device_id)
            return RelayState(relay=False)
        return RelayState(relay=_as_bool(attributes[0].get("value")))

    def set_relay(self, auth_header: str | None, desired: bool) -> bool:
        if not auth_header:
            raise Unauthorized()
        self._client.save_shared_attributes(auth_header, {RELAY_KEY: bool(desired)})
        logger.info("Relay on device %s set to %s", self._client.device_id, desired)
        return True
