"""
Runtime execution shell for a single walkie-talkie session.

Responsibilities:
- Own the authoritative SessionStatus
- Call the pure reducer
- Execute commands with side effects (devices, speech session, display)
- Convert the outcome of I/O commands back into events

Non-responsibilities:
- Lifecycle decisions (reducer)
- Audio framing, transcription, transport (session components)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Coroutine

from constants import PERMISSION_DENIED_REASON
from errors import ConnectionFailure, PermissionDenied
from observability.logger import log_event, now_ms
from observability.metrics import timed
from orchestrator.commands import (
    Command,
    LogEvent,
    OpenSpeechSession,
    PublishStatus,
    ReleaseResources,
    RequestPermissions,
    StartCapture,
)
from orchestrator.events import (
    Event,
    EventType,
    PermissionGranted,
    PermissionRefused,
    SpeechConnectFailed,
)
from orchestrator.reducer import reduce
from orchestrator.state_dataclass import SessionStatus

if TYPE_CHECKING:
    from orchestrator.runtime_context import RuntimeExecutionContext


class Runtime:
    """
    Runtime execution boundary for a single session.

    Guarantees:
    - Reducer is called exactly once per dispatched event
    - dispatch() is synchronous: the new status is visible to every reader
      (including the capture arming check) before dispatch() returns
    - I/O commands run as tracked tasks and report back through dispatch()
    - Side effects occur *after* the status has been updated
    """

    def __init__(
        self,
        *,
        context: RuntimeExecutionContext,
        initial_status: SessionStatus | None = None,
    ) -> None:
        self._status = initial_status or SessionStatus()
        self._ctx = context
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def status(self) -> SessionStatus:
        """
        Return the current immutable session status.

        Consumers must never modify this status directly.
        """
        return self._status

    def dispatch(self, event: Event) -> None:
        """
        Process a single event.

        1. Pass the current status and event to the pure reducer
        2. Swap in the new status
        3. Execute the emitted commands in order
        """
        new_status, commands = reduce(self._status, event)
        self._status = new_status

        for command in commands:
            self._execute(command)

    async def shutdown(self) -> None:
        """Wait for outstanding command tasks (including ones they spawn)."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def _execute(self, command: Command) -> None:
        if isinstance(command, LogEvent):
            log_event(command.event)

        elif isinstance(command, PublishStatus):
            self._ctx.publish_status(self._status)

        elif isinstance(command, RequestPermissions):
            self._spawn(self._request_permissions())

        elif isinstance(command, OpenSpeechSession):
            self._spawn(self._open_speech_session())

        elif isinstance(command, StartCapture):
            self._ctx.microphone.start(self._ctx.capture.on_tick)

        elif isinstance(command, ReleaseResources):
            self._spawn(self._ctx.release_resources())

        else:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "UNKNOWN_COMMAND",
                "session_id": self._status.session_id,
                "command_type": command.command_type.value,
            })

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _request_permissions(self) -> None:
        try:
            with timed("microphone_acquire", session_id=self._status.session_id):
                await self._ctx.microphone.open()
        except PermissionDenied as e:
            log_event({
                "ts_ms": now_ms(),
                "event_type": "PERMISSION_DENIED",
                "session_id": self._status.session_id,
                "error": str(e),
            })
            self.dispatch(PermissionRefused(
                event_type=EventType.PERMISSION_REFUSED,
                ts_ms=now_ms(),
                reason=PERMISSION_DENIED_REASON,
            ))
            return

        self.dispatch(PermissionGranted(
            event_type=EventType.PERMISSION_GRANTED,
            ts_ms=now_ms(),
        ))

    async def _open_speech_session(self) -> None:
        try:
            await self._ctx.speaker.open()
            with timed("speech_session_connect", session_id=self._status.session_id):
                await self._ctx.speech_adapter.open(self._ctx.speech_sink)
        except ConnectionFailure as e:
            reason = str(e)
        except Exception as e:  # pylint: disable=broad-exception-caught
            # Output device refusal lands here (PortAudioError/OSError)
            reason = f"output device unavailable: {e}"
        else:
            # READY arrives later through SpeechSessionOpened
            return

        self.dispatch(SpeechConnectFailed(
            event_type=EventType.SPEECH_CONNECT_FAILED,
            ts_ms=now_ms(),
            reason=reason,
        ))
