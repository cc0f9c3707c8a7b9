# sparql_sink/kg/sparql_sink.py
import logging
from typing import Dict, Optional, Tuple

import requests

from ..config.settings import SparqlSettings
from ..errors import TransportError, UpstreamStatusError

__all__ = ["SparqlEndpoint"]

log = logging.getLogger("sparql_sink")

_OK = (200, 204)


class SparqlEndpoint:
    """
    Very small SPARQL 1.1 Update client:
      - update(): POST application/sparql-update
    One call, one timeout, no retry.
    """
    def __init__(
        self,
        endpoint: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.endpoint = (endpoint or "").strip()
        if not self.endpoint:
            raise ValueError("SPARQL update endpoint is required (SPARQL_ENDPOINT).")
        self.auth: Optional[Tuple[str, str]] = (username, password) if (username and password) else None
        self.timeout = timeout

    @classmethod
    def from_settings(cls, cfg: SparqlSettings) -> "SparqlEndpoint":
        return cls(cfg.endpoint, username=cfg.username, password=cfg.password, timeout=cfg.timeout)

    def update(self, sparql_update: str) -> requests.Response:
        """
        Execute a SPARQL UPDATE. Raises TransportError / UpstreamStatusError.
        """
        log.info("start post update")
        log.debug("sparql update : %s", sparql_update)
        headers = {"Content-Type": "application/sparql-update"}
        try:
            resp = requests.post(
                self.endpoint,
                data=sparql_update.encode("utf-8"),
                headers=headers,
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error("Error in sparql update request: %s", e)
            raise TransportError(f"SPARQL update request failed: {e}") from e

        if resp.status_code not in _OK:
            log.error("sparql update error %s: %s", resp.status_code, getattr(resp, "text", "")[:300])
            raise UpstreamStatusError(self.endpoint, resp.status_code, getattr(resp, "text", ""))

        log.info("Success %s", resp.status_code)
        return resp

    def describe(self) -> Dict[str, object]:
        return {"endpoint": self.endpoint, "auth": bool(self.auth), "timeout": self.timeout}
