"""Event filters that adjust or drop events before they are sent."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from kubebot.events import Event, EventType, Level

NODE_NOT_READY = "NodeNotReady"
NODE_READY = "NodeReady"

DISABLE_ANNOTATION = "botkube.io/disable"
CHANNEL_ANNOTATION = "botkube.io/channel"

MetadataGetter = Callable[[Any], Any]


def _object_kind(obj: Any) -> str:
    if obj is None:
        return ""
    if isinstance(obj, Mapping):
        return obj.get("kind") or ""
    return getattr(obj, "kind", "") or ""


def _annotations(meta: Any) -> Mapping[str, str]:
    if meta is None:
        return {}
    if isinstance(meta, Mapping):
        return meta.get("annotations") or {}
    return getattr(meta, "annotations", None) or {}


class NodeEventsChecker:
    """Promotes critical node events and drops insignificant ones."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger(__name__)

    def run(self, event: Event) -> None:
        """Adjust a node event in place."""
        if _object_kind(event.object) == "Event":
            return
        if event.kind != "Node":
            return

        if event.reason == NODE_NOT_READY:
            event.type = EventType.ERROR
            event.level = Level.CRITICAL
        elif event.reason == NODE_READY:
            event.type = EventType.INFO
            event.level = Level.INFO
        else:
            event.skip = True

        self._log.debug("Node Critical Event filter successful!")

    def name(self) -> str:
        """Return the filter's name."""
        return "NodeEventsChecker"

    def describe(self) -> str:
        """Describe the filter."""
        return "Sends notifications on node level critical events."


class ObjectAnnotationChecker:
    """Skips or reroutes events based on botkube.io/* object annotations."""

    def __init__(
        self, metadata_getter: MetadataGetter | None, logger: logging.Logger | None = None
    ) -> None:
        self._metadata_getter = metadata_getter
        self._log = logger or logging.getLogger(__name__)

    def run(self, event: Event) -> None:
        """Mark the event skipped or set its channel from the object's annotations."""
        if self._metadata_getter is None:
            raise RuntimeError("while getting object metadata: no metadata getter configured")
        try:
            meta = self._metadata_getter(event.object)
        except Exception as err:
            raise RuntimeError(f"while getting object metadata: {err}") from err

        if self.is_object_notif_disabled(meta):
            event.skip = True
            self._log.debug("Object Notification Disable through annotations")

        channel = self.reconfigure_channel(meta)
        if channel is not None:
            event.channel = channel
            self._log.debug("Redirecting Event Notifications to channel: %s", channel)

        self._log.debug("Object annotations filter successful!")

    def name(self) -> str:
        """Return the filter's name."""
        return "ObjectAnnotationChecker"

    def describe(self) -> str:
        """Describe the filter."""
        return "Filters or reroutes events based on botkube.io/* Kubernetes resource annotations."

    def is_object_notif_disabled(self, meta: Any) -> bool:
        """Return True if the object disables notifications by annotation."""
        if _annotations(meta).get(DISABLE_ANNOTATION) == "true":
            self._log.debug("Skipping Disabled Event Notifications!")
            return True
        return False

    def reconfigure_channel(self, meta: Any) -> str | None:
        """Return the channel named by annotation, or None if absent."""
        return _annotations(meta).get(CHANNEL_ANNOTATION)