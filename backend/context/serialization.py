"""
Transcript serialization for the display layer.

Responsibilities:
- Convert transcript entries into plain JSON-ready dicts

Non-responsibilities:
- No filtering or reordering (the log is the single source of truth)
- No logging
"""

from __future__ import annotations

from typing import Any, Iterable

from context.transcript import TranscriptEntry


def serialize_entry(entry: TranscriptEntry) -> dict[str, Any]:
    """
    Serialize one entry.

    Output format:
        {"source": "local" | "peer", "text": "...", "sequence": 0}
    """
    return {
        "source": entry.source.value,
        "text": entry.text,
        "sequence": entry.sequence,
    }


def serialize_for_display(entries: Iterable[TranscriptEntry]) -> list[dict[str, Any]]:
    """Serialize entries in log order."""
    return [serialize_entry(e) for e in entries]
