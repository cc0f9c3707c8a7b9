# tests/conftest.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pytest

from sparql_sink.config.settings import GraphSettings, ServiceSettings, Settings, SourceSettings, SparqlSettings
from sparql_sink.context import SinkContext
from sparql_sink.kg.namespaces import NamespaceRegistry

GRAPH_BASE = "http://graphs.example.org/"


class FakeReader:
    """Stands in for SesamReader; records every entity it hands out."""

    def __init__(self, entities: Iterable[Any] = (), last_modified: Optional[str] = None, events: Optional[list] = None):
        self._entities = entities
        self.last_modified = last_modified if last_modified is not None else date.today().isoformat() + "T08:00:00Z"
        self.events = events if events is not None else []

    def metadata(self) -> Dict[str, Any]:
        return {"config": {"effective": {"namespaces": {"default": {"ex": "http://ex.org/"}}}}}

    def dataset_last_modified(self, dataset: str) -> Optional[str]:
        return self.last_modified

    def stream_entities(self, dataset: str):
        for i, e in enumerate(self._entities):
            self.events.append(("read", i))
            yield e

    def describe(self):
        return {"api": "http://sesam.example/api", "token": True, "timeout": 10.0}


class FakeSink:
    """Stands in for SparqlEndpoint; `fail_on` holds 1-based call numbers that raise."""

    def __init__(self, events: Optional[list] = None, fail_on: Iterable[int] = (), error: Optional[Exception] = None):
        self.updates: List[str] = []
        self.events = events if events is not None else []
        self.fail_on = set(fail_on)
        self.error = error

    def update(self, text: str):
        self.updates.append(text)
        self.events.append(("dispatch", len(self.updates)))
        if len(self.updates) in self.fail_on:
            raise self.error
        return None

    def describe(self):
        return {"endpoint": "http://store.example/update", "auth": False, "timeout": 10.0}


@pytest.fixture
def registry() -> NamespaceRegistry:
    return NamespaceRegistry({"ex": "http://ex.org/", "foaf": "http://xmlns.com/foaf/0.1/"})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        source=SourceSettings(api="http://sesam.example/api", jwt="secret-token"),
        sparql=SparqlSettings(endpoint="http://store.example/update", batch_size=100),
        graph=GraphSettings(base=GRAPH_BASE),
        service=ServiceSettings(port=5000),
    )


@pytest.fixture
def make_ctx(settings, registry):
    def _make(reader=None, sink=None) -> SinkContext:
        return SinkContext(
            settings=settings,
            namespaces=registry,
            reader=reader or FakeReader(),
            sink=sink or FakeSink(),
        )
    return _make
