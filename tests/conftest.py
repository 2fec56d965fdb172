from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from solar_relay.api import deps
from solar_relay.clients.thingsboard import ThingsBoardClient
from solar_relay.core.config import Settings
from solar_relay.factory import create_app
from solar_relay.services.auth import AuthTokenProvider
from solar_relay.services.telemetry import TelemetryService
from tests.fakes import BASE_URL, DEVICE_ID, FakeThingsBoard


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        tb_base_url=BASE_URL,
        tb_device_id=DEVICE_ID,
        tb_username="tenant@example.com",
        tb_password="secret",
        tb_timeout_seconds=1.0,
        telegram_bot_token=None,
        display_timezone="UTC",
    )


@pytest.fixture()
def upstream() -> FakeThingsBoard:
    return FakeThingsBoard()


@pytest.fixture()
def tb_client(upstream: FakeThingsBoard) -> ThingsBoardClient:
    client = upstream.client()
    yield client
    client.close()


@pytest.fixture()
def telemetry(tb_client: ThingsBoardClient, settings: Settings) -> TelemetryService:
    return TelemetryService(client=tb_client, settings=settings)


@pytest.fixture()
def auth_provider(tb_client: ThingsBoardClient, settings: Settings) -> AuthTokenProvider:
    return AuthTokenProvider(client=tb_client, settings=settings)


@pytest.fixture()
def client(settings: Settings, tb_client: ThingsBoardClient) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_thingsboard_client] = lambda: tb_client
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def auth_headers(upstream: FakeThingsBoard) -> dict[str, str]:
    return {"Authorization": f"Bearer {upstream.token}"}
