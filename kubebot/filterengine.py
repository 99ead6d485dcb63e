"""Registry of event filters and the engine that runs them."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Protocol

from kubebot.events import Event
from kubebot.filters import MetadataGetter, NodeEventsChecker, ObjectAnnotationChecker


class Filter(Protocol):
    def run(self, event: Event) -> None: ...

    def name(self) -> str: ...

    def describe(self) -> str: ...


@dataclass
class RegisteredFilter:
    """A filter together with its enabled flag."""

    filter: Filter
    enabled: bool = False

    @property
    def name(self) -> str:
        return self.filter.name()


class FilterNotFoundError(LookupError):
    """No filter is registered under the given name."""


class FilterEngine:
    """Registers filters and runs the enabled ones in name order."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger(__name__)
        self._filters: dict[str, RegisteredFilter] = {}

    def run(self, event: Event) -> Event:
        """Run enabled filters on a copy of the event and return it."""
        self._log.debug("Running registered filters")
        event = copy.copy(event)
        for registered in self.registered_filters():
            if not registered.enabled:
                continue
            try:
                registered.filter.run(event)
            except Exception:
                self._log.exception("while running filter %r", registered.name)
            self._log.debug(
                "ran filter name: %r, event was skipped: %s", registered.name, event.skip
            )
        return event

    def register(self, *args: RegisteredFilter) -> None:
        """Register filters, replacing any with the same name."""
        for registered in args:
            self._log.info(
                "Registering filter %r (enabled: %s)...", registered.name, registered.enabled
            )
            self._filters[registered.name] = registered

    def registered_filters(self) -> list[RegisteredFilter]:
        """Return registered filters sorted by name."""
        return [self._filters[name] for name in sorted(self._filters)]

    def set_filter(self, name: str, flag: bool) -> None:
        """Enable or disable the named filter."""
        registered = self._filters.get(name)
        if registered is None:
            raise FilterNotFoundError(f'couldn\'t find filter with name "{name}"')
        registered.enabled = flag


def with_all_filters(
    metadata_getter: MetadataGetter | None,
    object_annotation_checker: bool,
    node_events_checker: bool,
) -> FilterEngine:
    """Return an engine with all built-in filters registered."""
    engine = FilterEngine(logging.getLogger(f"{__name__}.engine"))
    engine.register(
        RegisteredFilter(
            filter=ObjectAnnotationChecker(
                metadata_getter, logging.getLogger(f"{__name__}.object_annotation_checker")
            ),
            enabled=object_annotation_checker,
        ),
        RegisteredFilter(
            filter=NodeEventsChecker(logging.getLogger(f"{__name__}.node_events_checker")),
            enabled=node_events_checker,
        ),
    )
    return engine