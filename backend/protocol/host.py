# backend/protocol/host.py
"""
JSON envelope codec for the host bridge WebSocket.

The host app (the messenger that owns the peer link and renders the UI)
talks to this service with one JSON object per text frame, discriminated by
"type".

Host -> relay:
    {"type": "init", "sessionId": "...", "userAddresses": "a,b" | ["a", "b"]}
    {"type": "networkData", "sender": "...", "data": "<base64 pcm>"}
    {"type": "networkProtocolData", "sender": "...", "protocolId": "...", "data": "..."}
    {"type": "storageData", "key": "...", "value": ...}
    {"type": "talkPress"} | {"type": "talkRelease"} | {"type": "endSession"}

Relay -> host:
    {"type": "onload"}
    {"type": "sendNetworkData", "data": "..."}
    {"type": "sendNetworkProtocolData", "protocolId": "...", "data": "..."}
    {"type": "getStorageData", "key": "..."}
    {"type": "setStorageData", "key": "...", "value": ...}
    {"type": "status", "state": "...", "status": "...", "talkEnabled": bool}
    {"type": "transcriptEntry", "source": "local" | "peer", "text": "...", "sequence": n}

Usage example:

    try:
        msg = decode_host_message(payload)
    except HostProtocolError as e:
        log_event({"event_type": "HOST_DECODE_ERROR", "error": str(e)})
        return

    if isinstance(msg, HostNetworkData):
        scheduler.schedule(msg.data)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from errors import HostProtocolError


# -------------------------
# Message types
# -------------------------

MSG_INIT = "init"
MSG_NETWORK_DATA = "networkData"
MSG_NETWORK_PROTOCOL_DATA = "networkProtocolData"
MSG_STORAGE_DATA = "storageData"
MSG_TALK_PRESS = "talkPress"
MSG_TALK_RELEASE = "talkRelease"
MSG_END_SESSION = "endSession"

OUT_ONLOAD = "onload"
OUT_SEND_NETWORK_DATA = "sendNetworkData"
OUT_SEND_NETWORK_PROTOCOL_DATA = "sendNetworkProtocolData"
OUT_GET_STORAGE_DATA = "getStorageData"
OUT_SET_STORAGE_DATA = "setStorageData"
OUT_STATUS = "status"
OUT_TRANSCRIPT_ENTRY = "transcriptEntry"


@dataclass(frozen=True)
class HostMessage:
    """Base class for decoded host -> relay messages."""


@dataclass(frozen=True)
class HostInit(HostMessage):
    session_id: str
    user_addresses: tuple[str, ...]


@dataclass(frozen=True)
class HostNetworkData(HostMessage):
    sender: str
    data: Any


@dataclass(frozen=True)
class HostNetworkProtocolData(HostMessage):
    sender: str
    protocol_id: str
    data: Any


@dataclass(frozen=True)
class HostStorageData(HostMessage):
    key: str
    value: Any


@dataclass(frozen=True)
class HostTalkPress(HostMessage):
    pass


@dataclass(frozen=True)
class HostTalkRelease(HostMessage):
    pass


@dataclass(frozen=True)
class HostEndSession(HostMessage):
    pass


# -------------------------
# Low-level helpers
# -------------------------

def _require_str(data: dict[str, Any], key: str, msg_type: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise HostProtocolError(f"{msg_type}: field '{key}' must be a string")
    return value


def _parse_addresses(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return tuple(a.strip() for a in raw.split(",") if a.strip())
    if isinstance(raw, list) and all(isinstance(a, str) for a in raw):
        return tuple(raw)
    raise HostProtocolError("init: 'userAddresses' must be a string or list of strings")


# -------------------------
# Host -> relay
# -------------------------

def decode_host_message(payload: str) -> HostMessage:
    """
    Decode one host text frame.

    Raises:
        HostProtocolError for invalid JSON, a non-object payload, an unknown
        type or missing fields.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise HostProtocolError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise HostProtocolError("host message must be a JSON object")

    msg_type = data.get("type")

    if msg_type == MSG_INIT:
        return HostInit(
            session_id=_require_str(data, "sessionId", msg_type),
            user_addresses=_parse_addresses(data.get("userAddresses")),
        )
    if msg_type == MSG_NETWORK_DATA:
        return HostNetworkData(
            sender=_require_str(data, "sender", msg_type),
            data=data.get("data"),
        )
    if msg_type == MSG_NETWORK_PROTOCOL_DATA:
        return HostNetworkProtocolData(
            sender=_require_str(data, "sender", msg_type),
            protocol_id=_require_str(data, "protocolId", msg_type),
            data=data.get("data"),
        )
    if msg_type == MSG_STORAGE_DATA:
        return HostStorageData(
            key=_require_str(data, "key", msg_type),
            value=data.get("value"),
        )
    if msg_type == MSG_TALK_PRESS:
        return HostTalkPress()
    if msg_type == MSG_TALK_RELEASE:
        return HostTalkRelease()
    if msg_type == MSG_END_SESSION:
        return HostEndSession()

    raise HostProtocolError(f"unknown host message type: {msg_type!r}")


# -------------------------
# Relay -> host
# -------------------------

def encode_onload() -> dict[str, Any]:
    return {"type": OUT_ONLOAD}


def encode_send_network_data(data: str) -> dict[str, Any]:
    return {"type": OUT_SEND_NETWORK_DATA, "data": data}


def encode_send_network_protocol_data(protocol_id: str, data: str) -> dict[str, Any]:
    return {"type": OUT_SEND_NETWORK_PROTOCOL_DATA, "protocolId": protocol_id, "data": data}


def encode_get_storage_data(key: str) -> dict[str, Any]:
    return {"type": OUT_GET_STORAGE_DATA, "key": key}


def encode_set_storage_data(key: str, value: Any) -> dict[str, Any]:
    return {"type": OUT_SET_STORAGE_DATA, "key": key, "value": value}


def encode_status(*, state: str, status: str, talk_enabled: bool) -> dict[str, Any]:
    return {"type": OUT_STATUS, "state": state, "status": status, "talkEnabled": talk_enabled}


def encode_transcript_entry(entry: dict[str, Any]) -> dict[str, Any]:
    return {"type": OUT_TRANSCRIPT_ENTRY, **entry}
