from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import DeviceStore
from main import create_app


@pytest.fixture
def store() -> DeviceStore:
    return DeviceStore()


@pytest.fixture
def devices_csv(tmp_path: Path) -> Path:
    path = tmp_path / "devices.csv"
    path.write_text("device_id\n60-6b-44-84-dc-64\nb4-45-52-a2-f1-3c\n", encoding="utf-8")
    return path


@pytest.fixture
def make_settings(devices_csv: Path):
    def _make(**overrides) -> Settings:
        values = {"DEVICES_CSV": devices_csv, "LOG_LEVEL": "WARNING"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def make_client(make_settings):
    clients = []

    def _make(**overrides) -> TestClient:
        client = TestClient(create_app(make_settings(**overrides)))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
