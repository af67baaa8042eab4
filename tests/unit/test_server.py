# pylint: disable=missing-module-docstring,missing-function-docstring,protected-access
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from config import AppConfig
from conftest import FakeSessionFactory
from observability import logger
from server.app import create_app


@pytest.fixture
def client(
    app_config: AppConfig,
    session_factory: FakeSessionFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> TestClient:
    # create_app toggles the process-wide logger switch
    monkeypatch.setattr(logger, "_enabled", logger._enabled)
    return TestClient(create_app(app_config, session_factory))


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ws_bridge_runs_a_session(client: TestClient, session_factory: FakeSessionFactory) -> None:
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "onload"}

        ws.send_json({"type": "init", "sessionId": "host-1", "userAddresses": "peer-1"})
        statuses = [ws.receive_json() for _ in range(3)]
        assert [s["state"] for s in statuses] == ["REQUESTING_PERMISSIONS", "CONNECTING", "READY"]

        ws.send_json({"type": "talkPress"})
        assert ws.receive_json()["status"] == "Recording..."

        ws.send_json({
            "type": "networkProtocolData",
            "sender": "peer-1",
            "protocolId": "com.ixilabs.spixi.walkie-talkie",
            "data": "loud &amp; clear",
        })
        assert ws.receive_json() == {
            "type": "transcriptEntry",
            "source": "peer",
            "text": "loud &amp; clear",
            "sequence": 0,
        }

    assert session_factory.built[0][0] == "host-1"


def test_create_app_requires_api_key(
    app_config: AppConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logger, "_enabled", logger._enabled)

    with pytest.raises(RuntimeError):
        create_app(replace(app_config, gemini_api_key=None))
