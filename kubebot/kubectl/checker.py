"""Checks whether kubectl verbs and resources are allowed."""

from __future__ import annotations

from collections.abc import Callable, Container, Iterable

from kubebot.kubectl.merger import EnabledKubectl

ResourceVariantsFunc = Callable[[str], Iterable[str]]


class Checker:
    """Validates verbs and resources against a merged kubectl config."""

    def __init__(self, resource_variants: ResourceVariantsFunc | None = None) -> None:
        self._resource_variants = resource_variants

    def is_resource_allowed_in_ns(self, config: EnabledKubectl, resource: str) -> bool:
        """Return True if the resource, or one of its variants, is allowed."""
        allowed = config.allowed_kubectl_resource
        if not allowed:
            return False
        if resource in allowed:
            return True
        if self._resource_variants is None:
            return False
        return any(name in allowed for name in self._resource_variants(resource) or ())

    def is_verb_allowed_in_ns(self, config: EnabledKubectl, verb: str) -> bool:
        """Return True if the verb is allowed by the config."""
        return verb in config.allowed_kubectl_verb

    def is_known_verb(self, all_verbs: Container[str] | None, verb: str) -> bool:
        """Return True if the verb is among all_verbs."""
        return all_verbs is not None and verb in all_verbs