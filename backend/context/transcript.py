"""
Transcript log.

Responsibilities:
- Store local and peer utterances in completion order
- Assign monotonic sequence numbers
- Hand readers a restartable snapshot

Non-responsibilities:
- No removal, editing or reordering (append-only)
- No persistence
- No display formatting
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

from observability.logger import log_event, now_ms


class Source(str, Enum):
    """Who spoke an utterance."""

    LOCAL = "local"
    PEER = "peer"


@dataclass(frozen=True)
class TranscriptEntry:
    """Single completed utterance."""
    source: Source
    text: str
    sequence: int


class TranscriptLog:
    """
    Append-only transcript owned by one session.

    Invariants:
    - Entries are stored in the order they were appended
    - sequence starts at 0 and increases by 1 per entry
    - Entries are immutable once appended
    """

    def __init__(
        self,
        session_id: str | None = None,
        on_append: Callable[[TranscriptEntry], None] | None = None,
    ) -> None:
        self._session_id = session_id
        self._entries: list[TranscriptEntry] = []
        self._on_append = on_append

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def append(self, source: Source, text: str) -> TranscriptEntry:
        """Append an utterance and notify the listener, if any."""
        entry = TranscriptEntry(source=source, text=text, sequence=len(self._entries))
        self._entries.append(entry)

        log_event({
            "ts_ms": now_ms(),
            "event_type": "transcript_entry_appended",
            "session_id": self._session_id,
            "source": source.value,
            "sequence": entry.sequence,
            "char_count": len(text),
        })

        if self._on_append is not None:
            self._on_append(entry)
        return entry

    def snapshot(self) -> tuple[TranscriptEntry, ...]:
        """Entries appended so far, unaffected by later appends."""
        return tuple(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._entries)
