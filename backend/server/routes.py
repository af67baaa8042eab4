"""
Route registration for the walkie-talkie relay.

Responsibilities:
- Define HTTP and WebSocket endpoints
- Wire the gateway to the host WebSocket lifecycle
- Pull dependencies from app.state
"""

from __future__ import annotations

import asyncio
import json

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from observability.logger import log_event, now_ms
from session.gateway import SessionGateway


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket) -> None: # pyright: ignore[reportUnusedFunction]
        await ws.accept()

        gateway = SessionGateway(
            config=app.state.config,
            session_factory=app.state.session_factory,
        )
        sender = asyncio.create_task(_drain_outbound(ws, gateway))

        try:
            await gateway.on_ws_connect()

            while True:
                text = await ws.receive_text()
                await gateway.on_json_message(text)

        except WebSocketDisconnect:
            await gateway.on_ws_disconnect(reason="client_disconnect")

        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": now_ms(),
                "event_type": "WS_FATAL_ERROR",
                "session_id": gateway.session.session_id if gateway.session else None,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            await gateway.on_ws_disconnect(reason="server_error")

        finally:
            sender.cancel()


async def _drain_outbound(ws: WebSocket, gateway: SessionGateway) -> None:
    """Forward queued host messages to the socket in FIFO order."""
    try:
        while True:
            msg = await gateway.outbound.get()
            await ws.send_text(json.dumps(msg))
    except WebSocketDisconnect:
        return
    except RuntimeError as exc:
        # Socket already closed by the receive side
        log_event({
            "ts_ms": now_ms(),
            "event_type": "WS_SEND_AFTER_CLOSE",
            "message": str(exc),
        })
