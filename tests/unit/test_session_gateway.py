# pylint: disable=missing-module-docstring,missing-function-docstring
import asyncio
import json
from dataclasses import replace
from typing import Any

import pytest

import session.gateway as gateway_mod
from config import AppConfig
from conftest import FakeSessionFactory
from orchestrator.enums.state import State
from session.gateway import SessionGateway

PROTOCOL = "com.ixilabs.spixi.walkie-talkie"


def _drain(gw: SessionGateway) -> list[dict[str, Any]]:
    out = []
    while not gw.outbound.empty():
        out.append(gw.outbound.get_nowait())
    return out


async def _ready_gateway(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> SessionGateway:
    gw = SessionGateway(config=app_config, session_factory=session_factory)
    await gw.on_ws_connect()
    await gw.on_json_message(json.dumps({
        "type": "init",
        "sessionId": "host-session",
        "userAddresses": "peer-1,peer-2",
    }))
    assert gw.session is not None
    await gw.session.runtime.shutdown()
    return gw


@pytest.mark.asyncio
async def test_connect_announces_onload(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = SessionGateway(config=app_config, session_factory=session_factory)
    await gw.on_ws_connect()

    assert _drain(gw) == [{"type": "onload"}]


@pytest.mark.asyncio
async def test_init_creates_session_and_publishes_status(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = await _ready_gateway(app_config, session_factory)

    messages = _drain(gw)
    statuses = [m for m in messages if m["type"] == "status"]
    assert [m["status"] for m in statuses] == [
        "Requesting Permissions...",
        "Connecting to Gemini...",
        "Ready",
    ]
    assert statuses[-1]["talkEnabled"] is True
    assert gw.session is not None
    assert gw.session.session_id == "host-session"
    assert gw.session.status.peer_addresses == ("peer-1", "peer-2")


@pytest.mark.asyncio
async def test_second_init_is_ignored(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = await _ready_gateway(app_config, session_factory)
    first = gw.session

    await gw.on_json_message('{"type":"init","sessionId":"other"}')

    assert gw.session is first
    assert len(session_factory.built) == 1


@pytest.mark.asyncio
async def test_talk_controls_and_capture_reach_host(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = await _ready_gateway(app_config, session_factory)
    _drain(gw)
    components = session_factory.built[0][1]

    await gw.on_json_message('{"type":"talkPress"}')
    components.microphone.tick([0.0] * 8)
    await gw.on_json_message('{"type":"talkRelease"}')

    messages = _drain(gw)
    assert [m["type"] for m in messages] == ["status", "sendNetworkData", "status"]
    assert messages[0]["state"] == State.RECORDING.value
    assert messages[1]["data"] == "AAAAAAAAAAAAAAAAAAAAAA=="
    assert messages[2]["state"] == State.READY.value


@pytest.mark.asyncio
async def test_peer_messages_are_routed_through_transport(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = await _ready_gateway(app_config, session_factory)
    _drain(gw)

    await gw.on_json_message(json.dumps({
        "type": "networkProtocolData",
        "sender": "peer-1",
        "protocolId": PROTOCOL,
        "data": "copy that",
    }))

    assert _drain(gw) == [
        {"type": "transcriptEntry", "source": "peer", "text": "copy that", "sequence": 0},
    ]


@pytest.mark.asyncio
async def test_local_turn_is_sent_tagged_and_displayed(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = await _ready_gateway(app_config, session_factory)
    _drain(gw)
    adapter = session_factory.built[0][1].speech_adapter

    adapter.sink.on_partial_transcription("roger ")
    adapter.sink.on_partial_transcription("that")
    adapter.sink.on_turn_complete()

    assert _drain(gw) == [
        {"type": "transcriptEntry", "source": "local", "text": "roger that", "sequence": 0},
        {"type": "sendNetworkProtocolData", "protocolId": PROTOCOL, "data": "roger that"},
    ]


@pytest.mark.asyncio
async def test_malformed_and_early_messages_are_logged(
    app_config: AppConfig,
    session_factory: FakeSessionFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(gateway_mod, "log_event", emitted.append)

    gw = SessionGateway(config=app_config, session_factory=session_factory)
    await gw.on_json_message("{nope")
    await gw.on_json_message('{"type":"talkPress"}')

    assert [e["event_type"] for e in emitted] == ["HOST_DECODE_ERROR", "MESSAGE_WITHOUT_SESSION"]
    assert gw.session is None


@pytest.mark.asyncio
async def test_end_session_and_disconnect_tear_down(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = await _ready_gateway(app_config, session_factory)
    components = session_factory.built[0][1]

    await gw.on_json_message('{"type":"endSession"}')
    await gw.on_ws_disconnect("client_disconnect")

    assert gw.session is not None
    assert gw.session.status.state is State.CLOSED
    assert components.microphone.stopped == 1
    assert components.speech_adapter.closed == 1
    statuses = [m for m in _drain(gw) if m["type"] == "status"]
    assert statuses[-1] == {
        "type": "status",
        "state": "CLOSED",
        "status": "Connection Closed",
        "talkEnabled": False,
    }


@pytest.mark.asyncio
async def test_disconnect_without_session(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = SessionGateway(config=app_config, session_factory=session_factory)
    await gw.on_ws_disconnect("client_disconnect")
    await asyncio.sleep(0)

    assert gw.session is None


@pytest.mark.asyncio
async def test_loopback_mode_initializes_without_host(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = SessionGateway(
        config=replace(app_config, loopback_transport=True),
        session_factory=session_factory,
    )
    await gw.on_ws_connect()
    assert gw.session is None

    await asyncio.sleep(0.2)

    assert gw.session is not None
    assert gw.session.session_id == "test-session-id"
    assert gw.session.status.peer_addresses == ("test-user-address1", "test-user-address2")
    await gw.on_ws_disconnect("client_disconnect")


@pytest.mark.asyncio
async def test_loopback_auto_init_is_cancelled_by_disconnect(
    app_config: AppConfig, session_factory: FakeSessionFactory
) -> None:
    gw = SessionGateway(
        config=replace(app_config, loopback_transport=True),
        session_factory=session_factory,
    )
    await gw.on_ws_connect()
    await gw.on_ws_disconnect("client_disconnect")

    await asyncio.sleep(0.2)

    assert gw.session is None
    assert session_factory.built == []
