"""Interface for sending notifications and messages to chat platforms."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from enum import Enum

from kubebot.events import Event
from kubebot.interactive import Base, Body, Message


class CommPlatformIntegration(str, Enum):
    """Supported communication platforms."""

    SLACK = "slack"
    SOCKET_SLACK = "socketSlack"
    MATTERMOST = "mattermost"
    TEAMS = "teams"
    DISCORD = "discord"
    ELASTICSEARCH = "elasticsearch"
    WEBHOOK = "webhook"


class IntegrationType(str, Enum):
    """Whether an integration only pushes notifications or is an interactive bot."""

    PUSH = "push"
    BOT = "bot"


class NotifierError(Exception):
    """A message could not be sent."""


class Notifier(ABC):
    """Sends event notifications and messages to a communication channel."""

    @abstractmethod
    def send_event(self, event: Event, sources: Iterable[str]) -> None:
        """Notify about a new event from the given sources."""

    @abstractmethod
    def send_message(self, message: Message) -> None:
        """Send a general message; integrations may ignore it."""

    @abstractmethod
    def integration_name(self) -> CommPlatformIntegration:
        """Return the communication platform name."""

    @abstractmethod
    def type(self) -> IntegrationType:
        """Return the integration type."""


def send_plaintext_message(notifiers: Iterable[Notifier], msg: str) -> None:
    """Send a plain-text message through every notifier, stopping at the first failure."""
    if not msg:
        raise ValueError("message cannot be empty")

    for notifier in notifiers:
        try:
            notifier.send_message(Message(base=Base(body=Body(plaintext=msg))))
        except Exception as err:
            raise NotifierError(f"while sending message: {err}") from err