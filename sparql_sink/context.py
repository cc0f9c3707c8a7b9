# sparql_sink/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config.settings import Settings
from .errors import StartupError
from .ingest.sesam_reader import SesamReader
from .kg.namespaces import NamespaceRegistry, load_namespaces
from .kg.sparql_sink import SparqlEndpoint

log = logging.getLogger("sparql_sink")


@dataclass(frozen=True)
class SinkContext:
    """Everything a request needs; built once at startup, shared read-only."""
    settings: Settings
    namespaces: NamespaceRegistry
    reader: SesamReader
    sink: SparqlEndpoint

    @property
    def batch_size(self) -> int:
        return self.settings.sparql.batch_size

    def store_graph_uri(self, graph: str) -> str:
        return self.settings.graph.base + graph

    def snapshot_graph_uri(self, graph: str, today: Optional[date] = None) -> str:
        day = (today or date.today()).isoformat()
        return f"{self.settings.graph.base}{graph}-{day}"


def bootstrap(settings: Settings) -> SinkContext:
    """
    Build the clients and load the namespace table. Raises StartupError if
    anything is missing; the caller must not start serving in that case.
    """
    log.info("Loading Config ---------------------- ")
    try:
        reader = SesamReader.from_settings(settings.source)
        sink = SparqlEndpoint.from_settings(settings.sparql)
    except ValueError as e:
        raise StartupError(str(e)) from e
    log.info("PORT: %s", settings.service.port)
    log.info("SPARQL: %s", settings.sparql.endpoint)
    log.info("Loaded Config  ---------------------- ")

    namespaces = load_namespaces(reader)
    return SinkContext(settings=settings, namespaces=namespaces, reader=reader, sink=sink)
