# sparql_sink/service/http_app.py
"""
HTTP surface of the sink.

  POST /snapshot/{graph}/{dataset}   full export into a date-suffixed graph
  POST /store/{graph}/entities       replace-by-subject upsert, JSON array body
  GET  /health                       configuration summary (secrets masked)

Reports are always returned as JSON. The status is 200 when everything was
written (or the snapshot was skipped as unchanged) and 502 when any update
failed or the export stream broke.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ..context import SinkContext
from ..errors import MalformedEntityError
from ..pipeline import SnapshotReport, StoreReport, run_snapshot, store_entities

log = logging.getLogger("sparql_sink")


def get_context(request: Request) -> SinkContext:
    return request.app.state.ctx


def _report_response(report) -> JSONResponse:
    return JSONResponse(status_code=200 if report.ok else 502, content=report.model_dump())


def create_app(ctx: SinkContext) -> FastAPI:
    """Build the app around an already-bootstrapped context."""
    app = FastAPI(title="SPARQL Sink", description="Source entities to SPARQL Update")
    app.state.ctx = ctx

    @app.post("/snapshot/{graph}/{dataset}", response_model=SnapshotReport)
    def publish_snapshot(graph: str, dataset: str, ctx: SinkContext = Depends(get_context)):
        log.info("Publish Snapshot %s -> %s", dataset, graph)
        try:
            report = run_snapshot(ctx, graph, dataset)
        except MalformedEntityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _report_response(report)

    @app.post("/store/{graph}/entities", response_model=StoreReport)
    def process_entities(graph: str, body: Any = Body(...), ctx: SinkContext = Depends(get_context)):
        log.info("Process Entities -> %s", graph)
        try:
            report = store_entities(ctx, graph, body)
        except MalformedEntityError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _report_response(report)

    @app.get("/health")
    def health(ctx: SinkContext = Depends(get_context)) -> Dict[str, Any]:
        return {
            "ok": True,
            "namespaces": len(ctx.namespaces),
            "source": ctx.reader.describe(),
            "sparql": ctx.sink.describe(),
            "graph_base": ctx.settings.graph.base,
        }

    return app
