# pylint: disable=missing-module-docstring,missing-function-docstring
import json

import pytest

from observability import metrics


def test_timed_emits_one_metric_even_on_error(captured_logs: list[str]) -> None:
    with pytest.raises(ValueError):
        with metrics.timed("speech_session_connect", session_id="s1", state="CONNECTING"):
            raise ValueError("boom")

    assert len(captured_logs) == 1
    event = json.loads(captured_logs[0])
    assert event["event_type"] == "METRIC_TIMER"
    assert event["metric"] == "speech_session_connect"
    assert event["session_id"] == "s1"
    assert event["value_ms"] >= 0


def test_timed_carries_details_on_success(captured_logs: list[str]) -> None:
    with metrics.timed("microphone_acquire", details={"device": "default"}):
        pass

    event = json.loads(captured_logs[0])
    assert event["metric"] == "microphone_acquire"
    assert event["details"] == {"device": "default"}
    assert event["session_id"] is None
