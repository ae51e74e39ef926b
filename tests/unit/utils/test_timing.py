import logging

import pytest

from shufflestore.utils.timing import Stopwatch, time_block


def test_time_block_reports_to_callable():
    messages: list[str] = []
    with time_block("work", messages.append) as watch:
        assert isinstance(watch, Stopwatch)
        assert watch.elapsed is None
    assert watch.elapsed is not None and watch.elapsed >= 0.0
    assert len(messages) == 1
    assert messages[0].startswith("work: ")
    assert messages[0].endswith(" s")


def test_time_block_defaults_to_debug_log(caplog):
    with caplog.at_level(logging.DEBUG, logger="shufflestore.utils.timing"):
        with time_block("quiet"):
            pass
    assert any(r.message.startswith("quiet: ") for r in caplog.records)


def test_time_block_is_silent_when_block_raises():
    messages: list[str] = []
    with pytest.raises(RuntimeError):
        with time_block("broken", messages.append):
            raise RuntimeError("boom")
    assert messages == []
