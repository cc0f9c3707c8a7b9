# sparql_sink/schema/contracts.py
"""
Entity record contract.

This module provides:
- validate_entity(obj) -> tuple[bool, dict | None, str | None]
- validate_entity_batch(body) -> list  (raises MalformedEntityError if not a list)
- is_property_key(key) -> bool

An entity is a JSON object with a non-empty string "_id" (a CURIE) and an
optional boolean "_deleted". Keys starting with "_" are internal; keys starting
with "$ids" carry sameAs references and are reserved. Everything else is a
property.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..errors import MalformedEntityError

# TODO: turn $ids references into owl:sameAs triples once a store needs them
RESERVED_PREFIXES = ("_", "$ids")


def is_property_key(key: str) -> bool:
    return not key.startswith(RESERVED_PREFIXES)


def validate_entity(obj: Any) -> Tuple[bool, Optional[Dict[str, Any]], Optional[str]]:
    """Check the entity shape. Returns (ok, entity, error)."""
    if not isinstance(obj, dict):
        return False, None, f"entity is {type(obj).__name__}, expected object"

    eid = obj.get("_id")
    if eid is None:
        return False, None, "missing _id"
    if not isinstance(eid, str) or not eid.strip():
        return False, None, "_id must be a non-empty string"

    deleted = obj.get("_deleted", False)
    if not isinstance(deleted, bool):
        return False, None, "_deleted must be a boolean"

    return True, obj, None


def validate_entity_batch(body: Any) -> List[Any]:
    """The incremental endpoint accepts only a JSON array of entities."""
    if not isinstance(body, list):
        raise MalformedEntityError(f"expected a JSON array of entities, got {type(body).__name__}")
    return body
