# sparql_sink/kg/statements.py
"""
SPARQL Update construction from source entities.

Two shapes:

  build_insert_data (snapshot path)
    INSERT DATA { GRAPH <g> { <s> <p> <o> . ... } }

  build_replace (incremental upsert path)
    WITH <g>
    DELETE { ?subject ?p ?o }
    INSERT { <s> <p> <o> . ... }
    WHERE { VALUES ?subject { <s1> <s2> ... } OPTIONAL { ?subject ?p ?o } }

Every subject in the batch (deleted ones included) is listed in VALUES so its
prior triples are removed; only live entities contribute inserts. OPTIONAL
keeps one solution per subject even when the store has nothing for it yet,
otherwise the INSERT template would never be instantiated for new subjects.

Terms are serialised with rdflib's n3(), so literal contents are always
escaped and IRIs are checked for illegal characters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rdflib import URIRef
from rdflib.term import Identifier

from ..errors import MalformedEntityError
from ..schema.contracts import is_property_key, validate_entity
from .namespaces import NamespaceRegistry
from .terms import Unsupported, classify, expand_terms

log = logging.getLogger("sparql_sink")


@dataclass
class BuiltUpdate:
    text: str
    triple_count: int = 0
    subjects: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def _n3(node: Identifier, entity_id: Optional[str]) -> str:
    try:
        return node.n3()
    except Exception as e:  # rdflib raises a bare Exception for unserialisable IRIs
        raise MalformedEntityError(str(e), entity_id) from e


def graph_term(graph_uri: str) -> str:
    """Serialised graph IRI; raises MalformedEntityError if it cannot be written."""
    return _n3(URIRef(graph_uri), None)


def _entity_triples(entity: Dict[str, Any], subject: str, registry: NamespaceRegistry) -> List[str]:
    """Triple lines for one live entity; raises MalformedEntityError on the first bad key/value."""
    entity_id = entity["_id"]
    s = _n3(URIRef(subject), entity_id)
    lines: List[str] = []
    for key, value in entity.items():
        if not is_property_key(key):
            continue
        p = _n3(URIRef(registry.expand(key)), entity_id)
        term = classify(value, registry)
        if isinstance(term, Unsupported):
            log.warning("Skipping %s on %s: %s", key, entity_id, term.reason)
            continue
        for obj in expand_terms(term):
            lines.append(f" {s} {p} {_n3(obj.to_rdf(), entity_id)} .")
    return lines


def _label(entity: Any, position: int) -> str:
    if isinstance(entity, dict) and isinstance(entity.get("_id"), str) and entity["_id"]:
        return entity["_id"]
    return f"#{position}"


def _map_entities(
    entities: Iterable[Any], registry: NamespaceRegistry
) -> Tuple[List[str], List[str], List[str]]:
    """Return (subject URIs, triple lines, skipped ids) for a batch."""
    subjects: List[str] = []
    lines: List[str] = []
    skipped: List[str] = []

    for position, raw in enumerate(entities):
        ok, entity, err = validate_entity(raw)
        if not ok:
            log.warning("Skipping malformed entity %s: %s", _label(raw, position), err)
            skipped.append(_label(raw, position))
            continue
        try:
            subject = registry.expand(entity["_id"])
            _n3(URIRef(subject), entity["_id"])
            triples = [] if entity.get("_deleted") else _entity_triples(entity, subject, registry)
        except MalformedEntityError as e:
            log.warning("Skipping entity %s: %s", entity["_id"], e)
            skipped.append(entity["_id"])
            continue
        subjects.append(subject)
        lines.extend(triples)

    return subjects, lines, skipped


def build_insert_data(graph_uri: str, entities: Iterable[Any], registry: NamespaceRegistry) -> BuiltUpdate:
    """Additive insert of all live entities into <graph_uri>."""
    g = graph_term(graph_uri)
    subjects, lines, skipped = _map_entities(entities, registry)
    log.info("number of entities to convert to sparql : %s", len(subjects) + len(skipped))

    body = "\n".join(lines)
    text = f"INSERT DATA {{ GRAPH {g} {{\n{body}\n}} }}\n"
    return BuiltUpdate(text=text, triple_count=len(lines), subjects=subjects, skipped=skipped)


def build_replace(graph_uri: str, entities: Iterable[Any], registry: NamespaceRegistry) -> BuiltUpdate:
    """Replace-by-subject of every entity in the batch within <graph_uri>."""
    g = graph_term(graph_uri)
    subjects, lines, skipped = _map_entities(entities, registry)

    values = "\n".join(f"  <{s}>" for s in subjects)
    body = "\n".join(lines)
    text = (
        f"WITH {g}\n"
        "DELETE { ?subject ?p ?o }\n"
        f"INSERT {{\n{body}\n}}\n"
        "WHERE {\n"
        f" VALUES ?subject {{\n{values}\n }}\n"
        " OPTIONAL { ?subject ?p ?o }\n"
        "}\n"
    )
    return BuiltUpdate(text=text, triple_count=len(lines), subjects=subjects, skipped=skipped)
