# sparql_sink/kg/terms.py
"""
Value classification: one decoded entity property value -> one RDF term.

Source values use a string tagging convention:
  "~:prefix:suffix"  reference to another resource (CURIE)
  "~t2020-01-01T..." xsd:dateTime literal
Anything else that is a string is a plain literal. Numbers with a zero
fractional part are xsd:integer, all others xsd:float with six decimals.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Tuple, Union

from rdflib import Literal, URIRef
from rdflib.namespace import XSD

from .namespaces import NamespaceRegistry

log = logging.getLogger("sparql_sink")

REFERENCE_TAG = "~:"
DATETIME_TAG = "~t"


@dataclass(frozen=True)
class IntegerLiteral:
    value: int

    def to_rdf(self) -> Literal:
        return Literal(str(self.value), datatype=XSD.integer, normalize=False)


@dataclass(frozen=True)
class FloatLiteral:
    lexical: str

    def to_rdf(self) -> Literal:
        return Literal(self.lexical, datatype=XSD.float, normalize=False)


@dataclass(frozen=True)
class PlainLiteral:
    value: str

    def to_rdf(self) -> Literal:
        return Literal(self.value)


@dataclass(frozen=True)
class Reference:
    uri: str

    def to_rdf(self) -> URIRef:
        return URIRef(self.uri)


@dataclass(frozen=True)
class DateTimeLiteral:
    lexical: str

    def to_rdf(self) -> Literal:
        return Literal(self.lexical, datatype=XSD.dateTime, normalize=False)


@dataclass(frozen=True)
class ListTerm:
    items: Tuple["ScalarTerm", ...]


@dataclass(frozen=True)
class Unsupported:
    value: Any
    reason: str


ScalarTerm = Union[IntegerLiteral, FloatLiteral, PlainLiteral, Reference, DateTimeLiteral]
Term = Union[ScalarTerm, ListTerm, Unsupported]


def _classify_number(value: Union[int, float, Decimal]) -> Union[IntegerLiteral, FloatLiteral, Unsupported]:
    if isinstance(value, int):
        return IntegerLiteral(value)
    f = float(value)
    if not math.isfinite(f):
        return Unsupported(value, "non-finite number")
    if f.is_integer():
        return IntegerLiteral(int(f))
    return FloatLiteral("%f" % f)


def _classify_string(value: str, registry: NamespaceRegistry) -> ScalarTerm:
    if value.startswith(REFERENCE_TAG):
        return Reference(registry.expand(value[2:]))
    if value.startswith(DATETIME_TAG):
        return DateTimeLiteral(value[2:])
    return PlainLiteral(value)


def _classify_scalar(value: Any, registry: NamespaceRegistry) -> Union[ScalarTerm, Unsupported]:
    # bool is an int subclass; it has no mapping in the source convention
    if value is None or isinstance(value, bool):
        return Unsupported(value, f"unsupported type {type(value).__name__}")
    if isinstance(value, (int, float, Decimal)):
        return _classify_number(value)
    if isinstance(value, str):
        return _classify_string(value, registry)
    return Unsupported(value, f"unsupported type {type(value).__name__}")


def classify(value: Any, registry: NamespaceRegistry) -> Term:
    """
    Classify one property value. Lists are classified element by element;
    unsupported elements are dropped with a warning. Raises UnknownPrefixError
    when a reference uses a prefix the registry does not know.
    """
    if isinstance(value, list):
        items = []
        for element in value:
            term = _classify_scalar(element, registry)
            if isinstance(term, Unsupported):
                log.warning("Skipping list element: %s (%r)", term.reason, element)
                continue
            items.append(term)
        return ListTerm(tuple(items))
    return _classify_scalar(value, registry)


def expand_terms(term: Term) -> Tuple[ScalarTerm, ...]:
    """Flatten a classified term into the object terms it contributes."""
    if isinstance(term, ListTerm):
        return term.items
    if isinstance(term, Unsupported):
        return ()
    return (term,)
