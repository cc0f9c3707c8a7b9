# sparql_sink/kg/namespaces.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

from ..errors import SinkError, StartupError, UnknownPrefixError

log = logging.getLogger("sparql_sink")

# Substituted when an identifier is not a "prefix:suffix" CURIE
FALLBACK_URI = "http://example.org/1"

# Where the source metadata document keeps the default namespace table
_METADATA_PATH = ("config", "effective", "namespaces", "default")


@dataclass(frozen=True)
class NamespaceRegistry:
    """
    Read-only prefix -> URI table, built once before the service starts.
    """
    mappings: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "mappings", MappingProxyType(dict(self.mappings)))

    def __len__(self) -> int:
        return len(self.mappings)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self.mappings

    @classmethod
    def from_metadata(cls, doc: Dict[str, Any]) -> "NamespaceRegistry":
        node: Any = doc
        for key in _METADATA_PATH:
            if not isinstance(node, dict) or key not in node:
                raise StartupError(f"Metadata has no {'.'.join(_METADATA_PATH)} mapping")
            node = node[key]
        if not isinstance(node, dict):
            raise StartupError("Namespace mapping in metadata is not an object")
        return cls({str(k): str(v) for k, v in node.items()})

    def expand(self, curie: str) -> str:
        """
        Expand 'prefix:suffix' to a full URI.
        Unknown prefix -> UnknownPrefixError; anything not split in two -> FALLBACK_URI.
        """
        parts = curie.split(":")
        if len(parts) == 2:
            prefix, suffix = parts
            if prefix not in self.mappings:
                raise UnknownPrefixError(prefix, curie)
            return self.mappings[prefix] + suffix

        log.warning("No namespace detected, using default. Original value: %s", curie)
        return FALLBACK_URI


def load_namespaces(reader) -> NamespaceRegistry:
    """Fetch {base}/metadata and build the registry. Any failure is fatal to startup."""
    try:
        doc = reader.metadata()
    except SinkError as e:
        raise StartupError(f"Could not fetch node metadata: {e}") from e
    registry = NamespaceRegistry.from_metadata(doc)
    log.info("Loaded %s namespace mappings", len(registry))
    return registry
