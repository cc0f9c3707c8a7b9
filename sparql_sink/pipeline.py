# sparql_sink/pipeline.py
"""
The two sink paths.

snapshot:  freshness gate -> stream export -> batches of N -> INSERT DATA per batch
store:     JSON array body -> one WITH/DELETE/INSERT/WHERE update

Batches are dispatched strictly one after another. A failed dispatch is logged
and counted, and the next batch still runs. A broken export stream stops the
run; batches already written stay in the graph.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Iterator, List, Optional, TypeVar

from pydantic import BaseModel, Field

from .context import SinkContext
from .errors import FreshnessCheckError, StreamDecodeError, TransportError, UpstreamStatusError
from .kg.statements import build_insert_data, build_replace, graph_term
from .schema.contracts import validate_entity_batch

log = logging.getLogger("sparql_sink")

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Reports
# -----------------------------------------------------------------------------
class SnapshotReport(BaseModel):
    ok: bool = True
    graph: str
    dataset: str
    skipped_unchanged: bool = False
    aborted: bool = False
    entities: int = 0
    batches: int = 0
    dispatched: int = 0
    failed: int = 0
    triples: int = 0
    skipped_entities: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class StoreReport(BaseModel):
    ok: bool = True
    graph: str
    entities: int = 0
    subjects: int = 0
    triples: int = 0
    dispatched: bool = False
    skipped_entities: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Batch controller
# -----------------------------------------------------------------------------
def iter_batches(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """Lazily group items into lists of `size`; the last one may be shorter."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    batch: List[T] = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


# -----------------------------------------------------------------------------
# Freshness gate
# -----------------------------------------------------------------------------
def is_dataset_fresh(reader, dataset: str, today: Optional[date] = None) -> bool:
    """
    True when the dataset's last-modified date (day granularity) is today.
    Fails closed: an unreadable status raises FreshnessCheckError.
    """
    try:
        modified = reader.dataset_last_modified(dataset)
    except (TransportError, UpstreamStatusError) as e:
        raise FreshnessCheckError(f"Could not read status of dataset {dataset}: {e}") from e
    if not modified:
        raise FreshnessCheckError(f"Dataset {dataset} has no runtime.last-modified")
    day = (today or date.today()).isoformat()
    return modified[:10] == day


# -----------------------------------------------------------------------------
# Paths
# -----------------------------------------------------------------------------
def run_snapshot(ctx: SinkContext, graph: str, dataset: str, today: Optional[date] = None) -> SnapshotReport:
    """Write today's snapshot of `dataset` into <graph_base><graph>-YYYY-MM-DD."""
    today = today or date.today()
    graph_uri = ctx.snapshot_graph_uri(graph, today)
    graph_term(graph_uri)
    report = SnapshotReport(graph=graph_uri, dataset=dataset)

    try:
        fresh = is_dataset_fresh(ctx.reader, dataset, today)
    except FreshnessCheckError as e:
        log.error("%s", e)
        report.ok = False
        report.errors.append(str(e))
        return report

    if not fresh:
        log.info("Dataset has not changed so no snapshot is written. Dataset is %s", dataset)
        report.skipped_unchanged = True
        return report

    try:
        for batch in iter_batches(ctx.reader.stream_entities(dataset), ctx.batch_size):
            report.entities += len(batch)
            report.batches += 1
            built = build_insert_data(graph_uri, batch, ctx.namespaces)
            report.skipped_entities.extend(built.skipped)
            try:
                ctx.sink.update(built.text)
            except (TransportError, UpstreamStatusError) as e:
                report.failed += 1
                report.errors.append(f"batch {report.batches}: {e}")
                continue
            report.dispatched += 1
            report.triples += built.triple_count
    except (StreamDecodeError, TransportError, UpstreamStatusError) as e:
        # already-dispatched batches are not rolled back
        log.error("Snapshot of %s aborted after %s batch(es): %s", dataset, report.dispatched, e)
        report.aborted = True
        report.errors.append(str(e))

    report.ok = not report.aborted and report.failed == 0
    log.info(
        "Snapshot %s -> %s: %s entities, %s/%s batches ok",
        dataset, graph_uri, report.entities, report.dispatched, report.batches,
    )
    return report


def store_entities(ctx: SinkContext, graph: str, body: Any) -> StoreReport:
    """Replace the triples of every subject in `body` within <graph_base><graph>."""
    graph_uri = ctx.store_graph_uri(graph)
    entities = validate_entity_batch(body)
    report = StoreReport(graph=graph_uri, entities=len(entities))

    built = build_replace(graph_uri, entities, ctx.namespaces)
    report.skipped_entities = built.skipped
    report.subjects = len(built.subjects)
    report.triples = built.triple_count

    if not built.subjects:
        log.info("No entities to store in %s", graph_uri)
        return report

    try:
        ctx.sink.update(built.text)
    except (TransportError, UpstreamStatusError) as e:
        report.ok = False
        report.errors.append(str(e))
        return report

    report.dispatched = True
    return report


__all__ = [
    "SnapshotReport",
    "StoreReport",
    "iter_batches",
    "is_dataset_fresh",
    "run_snapshot",
    "store_entities",
]
