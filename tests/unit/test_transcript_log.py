# pylint: disable=missing-module-docstring,missing-function-docstring
from context.serialization import serialize_for_display
from context.transcript import Source, TranscriptEntry, TranscriptLog


def test_entries_keep_completion_order_and_sequence() -> None:
    log = TranscriptLog()
    log.append(Source.LOCAL, "hi")
    log.append(Source.PEER, "hello back")
    log.append(Source.LOCAL, "over")

    assert [(e.source, e.text, e.sequence) for e in log] == [
        (Source.LOCAL, "hi", 0),
        (Source.PEER, "hello back", 1),
        (Source.LOCAL, "over", 2),
    ]
    assert len(log) == 3


def test_iteration_is_a_snapshot() -> None:
    log = TranscriptLog()
    log.append(Source.LOCAL, "one")

    it = iter(log)
    log.append(Source.LOCAL, "two")

    assert [e.text for e in it] == ["one"]
    assert [e.text for e in log] == ["one", "two"]
    # Restartable
    assert list(log) == list(log)


def test_listener_sees_each_append() -> None:
    seen: list[TranscriptEntry] = []
    log = TranscriptLog(session_id="s", on_append=seen.append)

    entry = log.append(Source.PEER, "copy")

    assert seen == [entry]


def test_serialize_for_display() -> None:
    log = TranscriptLog()
    log.append(Source.LOCAL, "a")
    log.append(Source.PEER, "b")

    assert serialize_for_display(log) == [
        {"source": "local", "text": "a", "sequence": 0},
        {"source": "peer", "text": "b", "sequence": 1},
    ]
