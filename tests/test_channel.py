"""
CallbackChannel Tests
=====================

Registration-ordered delivery, snapshot dispatch and failure isolation.
"""

import pytest

from cadence_events import CallbackChannel
from cadence_logging import LogEvent
from conftest import Recorder, logged_events


class TestCallbackChannel:

    def test_delivers_in_registration_order(self):
        order = []
        channel = CallbackChannel("test")
        channel.add(lambda v: order.append(("a", v)))
        channel.add(lambda v: order.append(("b", v)))
        channel.add(lambda v: order.append(("c", v)))

        assert channel.invoke(7) == 3
        assert order == [("a", 7), ("b", 7), ("c", 7)]

    def test_duplicate_registration_delivers_twice(self, recorder):
        channel = CallbackChannel("test")
        channel.add(recorder)
        channel.add(recorder)

        channel.invoke()
        assert recorder.count == 2

        assert channel.remove(recorder) is True
        channel.invoke()
        assert recorder.count == 3

    def test_remove_unknown_handler_returns_false(self, recorder):
        channel = CallbackChannel("test")
        assert channel.remove(recorder) is False

    def test_rejects_non_callable(self):
        channel = CallbackChannel("test")
        with pytest.raises(TypeError):
            channel.add("not callable")

    def test_handler_added_during_dispatch_runs_next_time(self, recorder):
        channel = CallbackChannel("test")

        def add_another():
            channel.add(recorder)

        channel.add(add_another)
        channel.invoke()
        assert recorder.count == 0

        channel.remove(add_another)
        channel.invoke()
        assert recorder.count == 1

    def test_handler_removed_during_dispatch_still_gets_current_call(self, recorder):
        channel = CallbackChannel("test")
        channel.add(lambda: channel.remove(recorder))
        channel.add(recorder)

        channel.invoke()
        assert recorder.count == 1
        assert recorder not in channel

    def test_raising_handler_is_logged_and_skipped(self, logger, recorder):
        channel = CallbackChannel("test", logger=logger)
        channel.add(Recorder(raises=RuntimeError("boom")))
        channel.add(recorder)

        assert channel.invoke("x") == 1
        assert recorder.calls == [("x",)]
        assert logged_events(logger, "error") == [LogEvent.CALLBACK_FAILED]

    def test_len_contains_clear(self, recorder):
        channel = CallbackChannel("test")
        channel.add(recorder)
        assert len(channel) == 1
        assert recorder in channel

        channel.clear()
        assert len(channel) == 0
        assert channel.invoke() == 0
