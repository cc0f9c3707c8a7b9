# tests/test_http_app.py
from __future__ import annotations

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from sparql_sink.errors import StreamDecodeError, UpstreamStatusError
from sparql_sink.service.http_app import create_app

from conftest import GRAPH_BASE, FakeReader, FakeSink


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def client_for(make_ctx, sink):
    def _client(reader=None, sink_override=None):
        return TestClient(create_app(make_ctx(reader=reader, sink=sink_override or sink)))
    return _client


def test_store_entities_route(client_for, sink):
    client = client_for()
    resp = client.post("/store/people/entities", json=[{"_id": "ex:A", "ex:name": "hello"}])

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["graph"] == f"{GRAPH_BASE}people"
    assert body["triples"] == 1
    assert len(sink.updates) == 1
    assert '<http://ex.org/A> <http://ex.org/name> "hello" .' in sink.updates[0]


def test_store_entities_reports_skipped_ids(client_for):
    resp = client_for().post("/store/people/entities", json=[{"_id": "zz:A"}, {"_id": "ex:B"}])
    assert resp.status_code == 200
    assert resp.json()["skipped_entities"] == ["zz:A"]


def test_store_entities_rejects_object_body(client_for, sink):
    resp = client_for().post("/store/people/entities", json={"_id": "ex:A"})
    assert resp.status_code == 400
    assert sink.updates == []


def test_store_entities_upstream_failure_is_502(client_for):
    failing = FakeSink(fail_on=[1], error=UpstreamStatusError("http://store.example/update", 503, "down"))
    resp = client_for(sink_override=failing).post("/store/people/entities", json=[{"_id": "ex:A", "ex:n": 1}])
    assert resp.status_code == 502
    assert resp.json()["ok"] is False


def test_snapshot_route_writes_dated_graph(client_for, sink):
    reader = FakeReader([{"_id": f"ex:e{i}", "ex:n": i} for i in range(3)])
    resp = client_for(reader=reader).post("/snapshot/people/people-ds")

    assert resp.status_code == 200
    body = resp.json()
    assert body["graph"] == f"{GRAPH_BASE}people-{date.today().isoformat()}"
    assert body["batches"] == 1
    assert len(sink.updates) == 1


def test_snapshot_route_unchanged_dataset_is_a_successful_noop(client_for, sink):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    resp = client_for(reader=FakeReader([{"_id": "ex:A"}], last_modified=yesterday)).post("/snapshot/people/ds")

    assert resp.status_code == 200
    assert resp.json()["skipped_unchanged"] is True
    assert sink.updates == []


def test_snapshot_route_broken_stream_is_502(client_for):
    class _Reader(FakeReader):
        def stream_entities(self, dataset):
            yield {"_id": "ex:A"}
            raise StreamDecodeError("truncated")

    resp = client_for(reader=_Reader()).post("/snapshot/people/ds")
    assert resp.status_code == 502
    body = resp.json()
    assert body["aborted"] is True
    assert "truncated" in body["errors"][0]


def test_health(client_for):
    body = client_for().get("/health").json()
    assert body["ok"] is True
    assert body["namespaces"] == 2
    assert body["graph_base"] == GRAPH_BASE


def test_snapshot_route_rejects_unwritable_graph_name(client_for, sink):
    resp = client_for().post("/snapshot/has%20space/ds")
    assert resp.status_code == 400
    assert sink.updates == []
