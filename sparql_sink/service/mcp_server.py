# sparql_sink/service/mcp_server.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, List

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from ..context import SinkContext
from ..errors import MalformedEntityError
from ..pipeline import SnapshotReport, StoreReport, run_snapshot, store_entities

log = logging.getLogger("sparql_sink")

# -----------------------------------------------------------------------------
# Pydantic models
# -----------------------------------------------------------------------------
class SnapshotInput(BaseModel):
    graph: str = Field(description="Graph name; appended to GRAPH_BASE and suffixed with today's date.")
    dataset: str = Field(description="Source dataset to export.")

class StoreEntitiesInput(BaseModel):
    graph: str = Field(description="Graph name; appended to GRAPH_BASE.")
    entities: List[Any] = Field(default_factory=list, description="Entities with _id and properties.")

class ExpandCurieInput(BaseModel):
    curie: str = Field(description="Compact identifier, e.g. 'ex:Foo'.")

class ExpandCurieOutput(BaseModel):
    ok: bool
    uri: str = ""
    error: str = ""

# -----------------------------------------------------------------------------
# Plain implementations (callable from tests)
# -----------------------------------------------------------------------------
def snapshot_impl(ctx: SinkContext, inp: SnapshotInput) -> SnapshotReport:
    try:
        report = run_snapshot(ctx, inp.graph, inp.dataset)
    except MalformedEntityError as e:
        log.warning("snapshot rejected graph=%s: %s", inp.graph, e)
        graph_uri = ctx.snapshot_graph_uri(inp.graph, date.today())
        return SnapshotReport(ok=False, graph=graph_uri, dataset=inp.dataset, errors=[str(e)])
    log.info("snapshot dataset=%s ok=%s batches=%s", inp.dataset, report.ok, report.batches)
    return report


def store_entities_impl(ctx: SinkContext, inp: StoreEntitiesInput) -> StoreReport:
    report = store_entities(ctx, inp.graph, inp.entities)
    log.info("store_entities graph=%s n=%s ok=%s", inp.graph, report.entities, report.ok)
    return report


def expand_curie_impl(ctx: SinkContext, inp: ExpandCurieInput) -> ExpandCurieOutput:
    try:
        return ExpandCurieOutput(ok=True, uri=ctx.namespaces.expand(inp.curie))
    except MalformedEntityError as e:
        return ExpandCurieOutput(ok=False, error=str(e))

# -----------------------------------------------------------------------------
# Server
# -----------------------------------------------------------------------------
def create_mcp(ctx: SinkContext) -> FastMCP:
    mcp = FastMCP("sparql_sink")

    @mcp.tool(name="snapshot")
    def tool_snapshot(inp: SnapshotInput) -> SnapshotReport:
        return snapshot_impl(ctx, inp)

    @mcp.tool(name="store_entities")
    def tool_store_entities(inp: StoreEntitiesInput) -> StoreReport:
        return store_entities_impl(ctx, inp)

    @mcp.tool(name="expand_curie")
    def tool_expand_curie(inp: ExpandCurieInput) -> ExpandCurieOutput:
        return expand_curie_impl(ctx, inp)

    return mcp
