# sparql_sink/errors.py
"""
Error taxonomy for the sink.

- StartupError: namespaces could not be loaded; the process must not serve.
- MalformedEntityError: a single entity cannot be mapped; it is skipped.
- TransportError: connection failure or timeout against either upstream.
- UpstreamStatusError: an upstream answered with an unexpected status.
- StreamDecodeError: the entity export stream broke mid-way.
- FreshnessCheckError: the dataset status could not be determined.
"""

from __future__ import annotations

from typing import Optional


class SinkError(RuntimeError):
    """Base class for all sink errors."""


class StartupError(SinkError):
    pass


class MalformedEntityError(SinkError):
    def __init__(self, message: str, entity_id: Optional[str] = None):
        super().__init__(message)
        self.entity_id = entity_id


class UnknownPrefixError(MalformedEntityError):
    def __init__(self, prefix: str, curie: str):
        super().__init__(f"Unknown namespace prefix '{prefix}' in '{curie}'")
        self.prefix = prefix
        self.curie = curie


class TransportError(SinkError):
    pass


class UpstreamStatusError(SinkError):
    def __init__(self, url: str, status: int, body: str = ""):
        super().__init__(f"{url} answered {status}: {body[:200]}")
        self.url = url
        self.status = status
        self.body = body


class StreamDecodeError(SinkError):
    pass


class FreshnessCheckError(SinkError):
    pass
