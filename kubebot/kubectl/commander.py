"""Generates kubectl commands suggested for an event notification."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from kubebot.events import Event, EventType
from kubebot.kubectl.guard import APIResource, GuardError, Resource, VerbNotSupportedError
from kubebot.kubectl.merger import EnabledKubectl

# Verbs never offered as actions on event notifications.
_UNSUPPORTED_EVENT_COMMAND_VERBS = frozenset({"delete"})


@dataclass(frozen=True)
class Command:
    """A kubectl command offered to the user."""

    name: str
    cmd: str


class EnabledKubectlMerger(Protocol):
    def merge_for_namespace(
        self, include_bindings: Iterable[str], for_namespace: str
    ) -> EnabledKubectl: ...


class CmdGuard(Protocol):
    def get_server_resource_map(self) -> Mapping[str, APIResource]: ...

    def get_resource_details_from_map(
        self, selected_verb: str, resource_type: str, res_map: Mapping[str, APIResource]
    ) -> Resource: ...


class Commander:
    """Builds kubectl commands for events based on executor bindings."""

    def __init__(
        self,
        merger: EnabledKubectlMerger,
        guard: CmdGuard | None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._merger = merger
        self._guard = guard
        self._log = logger or logging.getLogger(__name__)

    def get_commands_for_event(
        self, event: Event, executor_bindings: Iterable[str]
    ) -> list[Command]:
        """Return commands for the event, sorted by verb."""
        if event.type is EventType.DELETE:
            self._log.debug("Skipping commands for the DELETE type of event for %r...", event.kind)
            return []

        enabled = self._merger.merge_for_namespace(list(executor_bindings), event.namespace)

        resource_name = event.resource.split("/")[-1]
        if resource_name not in enabled.allowed_kubectl_resource:
            return []

        verbs = []
        for verb in enabled.allowed_kubectl_verb:
            if verb in _UNSUPPORTED_EVENT_COMMAND_VERBS:
                self._log.debug(
                    "Skipping unsupported verb %r for event notification %r...", verb, event.kind
                )
                continue
            verbs.append(verb)
        verbs.sort()

        if self._guard is None:
            raise GuardError("no command guard configured")
        res_map = self._guard.get_server_resource_map()

        commands = []
        for verb in verbs:
            try:
                res = self._guard.get_resource_details_from_map(verb, resource_name, res_map)
            except VerbNotSupportedError:
                self._log.warning(
                    "Not supported verb %r for resource %r. Skipping...", verb, resource_name
                )
                continue
            except GuardError as err:
                raise GuardError(f"while getting resource details: {err}") from err

            sep = "/" if res.slash_separated_in_command else " "
            namespace_part = f" --namespace {event.namespace}" if res.namespaced else ""
            commands.append(
                Command(name=verb, cmd=f"{verb} {resource_name}{sep}{event.name}{namespace_part}")
            )
        return commands