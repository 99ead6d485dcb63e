import pytest

from kubebot.interactive import Message
from kubebot.notifier import (
    CommPlatformIntegration,
    IntegrationType,
    Notifier,
    NotifierError,
    send_plaintext_message,
)


class RecordingNotifier(Notifier):
    def __init__(self, fail=False):
        self.messages = []
        self.events = []
        self.fail = fail

    def send_event(self, event, sources):
        self.events.append((event, list(sources)))

    def send_message(self, message):
        if self.fail:
            raise RuntimeError("boom")
        self.messages.append(message)

    def integration_name(self):
        return CommPlatformIntegration.SLACK

    def type(self):
        return IntegrationType.BOT


def test_sends_plaintext_to_all_notifiers():
    first, second = RecordingNotifier(), RecordingNotifier()
    send_plaintext_message([first, second], "hello")
    for n in (first, second):
        assert len(n.messages) == 1
        assert isinstance(n.messages[0], Message)
        assert n.messages[0].base.body.plaintext == "hello"
        assert n.messages[0].sections == []


def test_empty_message_is_rejected():
    n = RecordingNotifier()
    with pytest.raises(ValueError, match="message cannot be empty"):
        send_plaintext_message([n], "")
    assert n.messages == []


def test_stops_at_first_failure():
    failing, after = RecordingNotifier(fail=True), RecordingNotifier()
    with pytest.raises(NotifierError, match="while sending message: boom") as info:
        send_plaintext_message([failing, after], "hello")
    assert isinstance(info.value.__cause__, RuntimeError)
    assert after.messages == []


def test_no_notifiers_is_fine():
    notifiers = []
    send_plaintext_message(notifiers, "hello")
    assert notifiers == []


def test_notifier_is_abstract():
    with pytest.raises(TypeError):
        Notifier()


def test_enum_values():
    assert CommPlatformIntegration("socketSlack") is CommPlatformIntegration.SOCKET_SLACK
    with pytest.raises(ValueError):
        CommPlatformIntegration("no-such-platform")
    n = RecordingNotifier()
    send_plaintext_message([n], "status")
    assert n.messages[0].base.body.plaintext == "status"
    assert n.integration_name() is CommPlatformIntegration.SLACK
    assert n.type() is IntegrationType.BOT