"""Kubernetes event model shared by filters, formatters and notifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    """Kind of change or condition an event reports."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ERROR = "error"
    WARNING = "warning"
    NORMAL = "normal"
    INFO = "info"
    ALL = "all"


class Level(str, Enum):
    """Severity of an event."""

    INFO = "info"
    WARN = "warn"
    DEBUG = "debug"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(kw_only=True)
class Event:
    """A single event observed in a cluster."""

    kind: str = ""
    api_version: str = ""
    name: str = ""
    namespace: str = ""
    resource: str = ""
    type: EventType | None = None
    reason: str = ""
    level: Level | None = None
    cluster: str = ""
    channel: str = ""
    messages: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skip: bool = False
    object: Any = None

    def resource_name(self) -> str:
        """Return ``namespace/name`` for namespaced objects, else ``name``."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name