# tests/test_mcp_server.py
from __future__ import annotations

from datetime import date

from fastmcp import FastMCP

from sparql_sink.service import mcp_server
from sparql_sink.service.mcp_server import ExpandCurieInput, SnapshotInput, StoreEntitiesInput

from conftest import FakeReader, FakeSink


def test_store_entities_tool(make_ctx):
    sink = FakeSink()
    ctx = make_ctx(sink=sink)

    out = mcp_server.store_entities_impl(ctx, StoreEntitiesInput(graph="g", entities=[{"_id": "ex:A", "ex:v": 42.5}]))

    assert out.ok is True
    assert '"42.500000"^^<http://www.w3.org/2001/XMLSchema#float>' in sink.updates[0]


def test_snapshot_tool(make_ctx):
    sink = FakeSink()
    ctx = make_ctx(reader=FakeReader([{"_id": "ex:A", "ex:v": 1}]), sink=sink)

    out = mcp_server.snapshot_impl(ctx, SnapshotInput(graph="g", dataset="ds"))

    assert out.ok is True
    assert out.graph.endswith(f"g-{date.today().isoformat()}")
    assert len(sink.updates) == 1


def test_expand_curie_tool(make_ctx):
    ctx = make_ctx()
    assert mcp_server.expand_curie_impl(ctx, ExpandCurieInput(curie="ex:Foo")).uri == "http://ex.org/Foo"

    bad = mcp_server.expand_curie_impl(ctx, ExpandCurieInput(curie="zz:Foo"))
    assert bad.ok is False
    assert "zz" in bad.error


def test_create_mcp(make_ctx):
    mcp = mcp_server.create_mcp(make_ctx())
    assert isinstance(mcp, FastMCP)
    assert mcp.name == "sparql_sink"


def test_snapshot_tool_reports_invalid_graph_name(make_ctx):
    sink = FakeSink()
    ctx = make_ctx(reader=FakeReader([{"_id": "ex:A"}]), sink=sink)

    out = mcp_server.snapshot_impl(ctx, SnapshotInput(graph="has space", dataset="ds"))

    assert out.ok is False
    assert out.batches == 0
    assert len(out.errors) == 1
    assert sink.updates == []
