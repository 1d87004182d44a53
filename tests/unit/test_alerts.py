"""Unit tests for AlertChannel."""

import pytest

from hubwizard.errors import UnexpectedError
from hubwizard.services.alerts import AlertChannel


@pytest.mark.unit
class TestAlertChannel:

    def test_show_alert(self):
        channel = AlertChannel()

        alert = channel.show_alert("unexpectedError", UnexpectedError("boom"))

        assert alert.key == "unexpectedError"
        assert alert.message == "boom"
        assert channel.alerts == [alert]

    def test_message_is_error_text(self):
        channel = AlertChannel()
        cause = OSError("disk full")

        alert = channel.show_alert("unexpectedError", UnexpectedError("save failed", cause))

        assert alert.message == "save failed"

    def test_listeners_notified(self):
        channel = AlertChannel()
        received = []
        channel.subscribe(received.append)

        channel.show_alert("flashFailed", RuntimeError("offline"))

        assert [a.key for a in received] == ["flashFailed"]

    def test_failing_listener_ignored(self):
        channel = AlertChannel()
        received = []

        def broken(alert):
            raise ValueError("listener bug")

        channel.subscribe(broken)
        channel.subscribe(received.append)

        channel.show_alert("unexpectedError", RuntimeError("x"))

        assert len(received) == 1
        assert len(channel.alerts) == 1

    def test_history_trimmed(self):
        channel = AlertChannel(max_alerts=3)

        for i in range(5):
            channel.show_alert("unexpectedError", RuntimeError(str(i)))

        assert [a.message for a in channel.alerts] == ["2", "3", "4"]

    def test_clear(self):
        channel = AlertChannel()
        channel.show_alert("unexpectedError", RuntimeError("x"))

        channel.clear()

        assert channel.alerts == []
