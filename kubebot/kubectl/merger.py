"""Merging of kubectl executor configurations across bindings."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

ALL_NAMESPACE_INDICATOR = ".*"


def _matches(pattern: str, value: str) -> bool:
    try:
        return re.fullmatch(pattern, value) is not None
    except re.error:
        return False


@dataclass
class Namespaces:
    """Namespace include/exclude patterns (regular expressions)."""

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    def is_allowed(self, namespace: str) -> bool:
        """Return True if namespace matches an include and no exclude pattern."""
        if not namespace:
            return False
        if any(p and _matches(p, namespace) for p in self.exclude):
            return False
        return any(p and _matches(p, namespace) for p in self.include)


@dataclass
class Commands:
    """Allowed kubectl verbs and resources."""

    verbs: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)


@dataclass
class KubectlConfig:
    """Configuration of a single kubectl executor."""

    enabled: bool = False
    namespaces: Namespaces = field(default_factory=Namespaces)
    commands: Commands = field(default_factory=Commands)
    default_namespace: str = ""
    restrict_access: bool | None = None


@dataclass
class Executors:
    """A named executor entry."""

    kubectl: KubectlConfig = field(default_factory=KubectlConfig)


def executors_from_mapping(raw: Mapping[str, Any]) -> dict[str, Executors]:
    """Build executors from a parsed configuration mapping (camelCase keys)."""
    result: dict[str, Executors] = {}
    for name, entry in raw.items():
        kc = (entry or {}).get("kubectl") or {}
        ns = kc.get("namespaces") or {}
        cmds = kc.get("commands") or {}
        result[name] = Executors(
            kubectl=KubectlConfig(
                enabled=bool(kc.get("enabled", False)),
                namespaces=Namespaces(
                    include=list(ns.get("include") or []),
                    exclude=list(ns.get("exclude") or []),
                ),
                commands=Commands(
                    verbs=list(cmds.get("verbs") or []),
                    resources=list(cmds.get("resources") or []),
                ),
                default_namespace=kc.get("defaultNamespace") or "",
                restrict_access=kc.get("restrictAccess"),
            )
        )
    return result


@dataclass
class EnabledKubectl:
    """Merged kubectl configuration."""

    allowed_kubectl_verb: set[str] = field(default_factory=set)
    allowed_kubectl_resource: set[str] = field(default_factory=set)
    allowed_namespaces_per_resource: dict[str, Namespaces] = field(default_factory=dict)
    default_namespace: str = ""
    restrict_access: bool = False


class Merger:
    """Merges the kubectl executors referenced by a list of bindings."""

    def __init__(self, executors: Mapping[str, Executors] | None) -> None:
        self._executors = executors

    def merge_for_namespace(
        self, include_bindings: Iterable[str], for_namespace: str
    ) -> EnabledKubectl:
        """Merge enabled executors whose namespaces allow for_namespace.

        Verbs and resources are appended; default namespace and restrict
        access are overridden in binding order.
        """
        bindings = list(include_bindings)
        return self._merge(
            self._collect(
                bindings,
                lambda kc: kc.enabled and kc.namespaces.is_allowed(for_namespace),
            ),
            bindings,
        )

    def merge_all_enabled(self, include_bindings: Iterable[str]) -> EnabledKubectl:
        """Merge all enabled executors among the bindings."""
        bindings = list(include_bindings)
        return self._merge(self.get_all_enabled(bindings), bindings)

    def merge_all_enabled_verbs(self, bindings: Iterable[str]) -> set[str]:
        """Return verbs of all enabled executors among the bindings."""
        verbs: set[str] = set()
        if self._executors is None:
            return verbs
        for name in bindings:
            executor = self._executors.get(name)
            if executor is None or not executor.kubectl.enabled:
                continue
            verbs.update(executor.kubectl.commands.verbs)
        return verbs

    def get_all_enabled(self, include_bindings: Iterable[str]) -> dict[str, KubectlConfig]:
        """Return enabled executors for the bindings, without merging."""
        return self._collect(include_bindings, lambda kc: kc.enabled)

    def is_at_least_one_enabled(self) -> bool:
        """Return True if any configured kubectl executor is enabled."""
        if not self._executors:
            return False
        return any(e.kubectl.enabled for e in self._executors.values())

    def _collect(
        self,
        include_bindings: Iterable[str],
        predicate: Callable[[KubectlConfig], bool],
    ) -> dict[str, KubectlConfig]:
        if self._executors is None:
            return {}
        out: dict[str, KubectlConfig] = {}
        for name in include_bindings:
            executor = self._executors.get(name)
            if executor is None or not predicate(executor.kubectl):
                continue
            out[name] = executor.kubectl
        return out

    @staticmethod
    def _merge(
        collected: Mapping[str, KubectlConfig], key_order: Iterable[str]
    ) -> EnabledKubectl:
        if not collected:
            return EnabledKubectl()

        merged = EnabledKubectl()
        for name in key_order:
            item = collected.get(name)
            if item is None:
                continue
            for resource in item.commands.resources:
                merged.allowed_kubectl_resource.add(resource)
                ns = merged.allowed_namespaces_per_resource.setdefault(resource, Namespaces())
                ns.exclude.extend(item.namespaces.exclude)
                ns.include.extend(item.namespaces.include)
            merged.allowed_kubectl_verb.update(item.commands.verbs)
            if item.default_namespace:
                merged.default_namespace = item.default_namespace
            if item.restrict_access is not None:
                merged.restrict_access = item.restrict_access
        return merged