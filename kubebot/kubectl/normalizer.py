"""Normalizes resource names given in kubectl commands."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from kubebot.kubectl.guard import APIResourceList

_log = logging.getLogger(__name__)


@dataclass
class ResourceNormalizer:
    """Lookup tables from kinds and short names to plural resource names."""

    kind_resource_map: dict[str, str] = field(default_factory=dict)
    short_name_resource_map: dict[str, str] = field(default_factory=dict)

    def normalize(self, name: str) -> list[str]:
        """Return the lower-cased name, its short-name and its kind variants.

        A variant that is unknown is given as an empty string.
        """
        lowered = name.lower()
        return [
            lowered,
            self.short_name_resource_map.get(lowered, ""),
            self.kind_resource_map.get(lowered, ""),
        ]


def build_resource_normalizer(resource_lists: Iterable[APIResourceList]) -> ResourceNormalizer:
    """Build a normalizer from server resource lists, ignoring subresources."""
    normalizer = ResourceNormalizer()
    for res_list in resource_lists:
        for res in res_list.api_resources:
            if "/" in res.name:
                continue
            normalizer.kind_resource_map[res.kind.lower()] = res.name
            for short_name in res.short_names:
                normalizer.short_name_resource_map[short_name] = res.name
    _log.info("Loaded resource mapping: %r", normalizer)
    return normalizer