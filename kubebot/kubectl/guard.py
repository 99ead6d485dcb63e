"""Decides which kubectl verbs and resources interactive commands may use."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

_ADDITIONAL_RESOURCE_VERBS: dict[str, tuple[str, ...]] = {
    "nodes": ("cordon", "uncordon", "drain", "top"),
    "pods": ("top",),
}

# Verbs that the API does not report but that take a slash-separated
# resource argument, e.g. ``kubectl logs pods/<name>``.
_ADDITIONAL_VERBS_WITH_SLASH: dict[str, tuple[str, ...]] = {
    "pods": ("logs",),
    "jobs": ("logs",),
    "deployments": ("logs",),
    "statefulsets": ("logs",),
    "replicasets": ("logs",),
}

_RESOURCELESS_VERBS = frozenset({"auth", "api-versions", "api-resources", "cluster-info"})

_UNSUPPORTED_GLOBAL_VERBS = frozenset(
    {
        # reported by the API but not valid kubectl verbs
        "list",
        "watch",
        "deletecollection",
        # valid kubectl verbs not supported by interactive commands
        "create",
        "cp",
        "update",
        "patch",
        "diff",
        "port-forward",
        "attach",
        "apply",
        "replace",
        "auth",
        "explain",
        "autoscale",
        "scale",
        "wait",
        "proxy",
        "run",
    }
)


@dataclass(frozen=True)
class Resource:
    """A Kubernetes resource as used in a kubectl command."""

    name: str = ""
    namespaced: bool = False
    slash_separated_in_command: bool = False


@dataclass
class APIResource:
    """A resource type reported by the cluster's discovery API."""

    name: str
    namespaced: bool = False
    kind: str = ""
    verbs: list[str] = field(default_factory=list)
    short_names: list[str] = field(default_factory=list)


@dataclass
class APIResourceList:
    """Resources served under one group version."""

    group_version: str
    api_resources: list[APIResource] = field(default_factory=list)


class GuardError(Exception):
    """Base error raised by the command guard."""


class VerbNotSupportedError(GuardError):
    """The verb is not supported for the resource."""

    def __init__(self, message: str = "verb not supported") -> None:
        super().__init__(message)


class ResourceNotFoundError(GuardError):
    """The resource is not served by the cluster."""

    def __init__(self, message: str = "resource not found") -> None:
        super().__init__(message)


class DiscoveryError(GuardError):
    """The list of server resources could not be fetched."""


DiscoveryFunc = Callable[[], Iterable[APIResourceList]]


class CommandGuard:
    """Works out allowed resources and their details for a given verb."""

    def __init__(
        self, discovery: DiscoveryFunc | None, logger: logging.Logger | None = None
    ) -> None:
        self._discovery = discovery
        self._log = logger or logging.getLogger(__name__)

    def filter_supported_verbs(self, all_verbs: Iterable[str]) -> list[str]:
        """Drop verbs that interactive commands do not support."""
        return [v for v in all_verbs if v not in _UNSUPPORTED_GLOBAL_VERBS]

    def get_allowed_resources_for_verb(
        self, verb: str, all_configured_resources: Iterable[str]
    ) -> list[Resource]:
        """Return configured resources that support the verb.

        Returns an empty list for resourceless verbs and raises
        VerbNotSupportedError if no configured resource supports it.
        """
        if verb in _RESOURCELESS_VERBS:
            return []

        res_map = self.get_server_resource_map()
        resources = []
        for configured in all_configured_resources:
            try:
                resources.append(self.get_resource_details_from_map(verb, configured, res_map))
            except VerbNotSupportedError:
                continue
            except GuardError as err:
                raise GuardError(
                    f'while getting resource details for "{configured}": {err}'
                ) from err

        if not resources:
            raise VerbNotSupportedError()
        return resources

    def get_resource_details(self, selected_verb: str, resource_type: str) -> Resource:
        """Return resource details for a verb; empty details for resourceless verbs."""
        if selected_verb in _RESOURCELESS_VERBS:
            return Resource()
        res_map = self.get_server_resource_map()
        return self.get_resource_details_from_map(selected_verb, resource_type, res_map)

    def get_server_resource_map(self) -> dict[str, APIResource]:
        """Map resource names to server resources; first occurrence of a name wins."""
        if self._discovery is None:
            raise DiscoveryError("while getting server resources: no discovery client")
        try:
            res_lists = list(self._discovery())
        except Exception as err:
            raise DiscoveryError(f"while getting server resources: {err}") from err

        resource_map: dict[str, APIResource] = {}
        for item in res_lists:
            for res in item.api_resources:
                if res.name in resource_map:
                    self._log.info(
                        "Skipping resource with the same name %r (%r)...",
                        res.name,
                        item.group_version,
                    )
                    continue
                resource_map[res.name] = res
        return resource_map

    def get_resource_details_from_map(
        self,
        selected_verb: str,
        resource_type: str,
        res_map: Mapping[str, APIResource],
    ) -> Resource:
        """Return resource details for a verb using an already fetched map."""
        res = res_map.get(resource_type)
        if res is None:
            raise ResourceNotFoundError()

        if selected_verb in self._all_supported_verbs(resource_type, res.verbs):
            return Resource(name=res.name, namespaced=res.namespaced)

        if selected_verb in _ADDITIONAL_VERBS_WITH_SLASH.get(resource_type, ()):
            return Resource(
                name=res.name, namespaced=res.namespaced, slash_separated_in_command=True
            )

        raise VerbNotSupportedError()

    def _all_supported_verbs(self, resource_type: str, verbs: Iterable[str]) -> list[str]:
        supported = self.filter_supported_verbs(verbs)
        supported.extend(_ADDITIONAL_RESOURCE_VERBS.get(resource_type, ()))
        if "get" in supported:
            supported.append("describe")
        return supported