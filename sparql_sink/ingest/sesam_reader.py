# sparql_sink/ingest/sesam_reader.py
from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, Iterator, Optional

import ijson
import requests
import urllib3

from ..config.settings import SourceSettings
from ..errors import StreamDecodeError, TransportError, UpstreamStatusError

log = logging.getLogger("sparql_sink")


class SesamReader:
    """
    Read side of the source dataset platform:
      - metadata(): node metadata (namespace table lives here)
      - dataset_last_modified(): runtime.last-modified of a dataset
      - stream_entities(): the entity export, decoded one object at a time
    """

    def __init__(self, base_url: str, token: str = "", timeout: float = 10.0, export_timeout: float = 360.0):
        self.base_url = (base_url or "").strip()
        if not self.base_url:
            raise ValueError("Source API base URL is required (SESAM_API).")
        self.token = token
        self.timeout = timeout
        self.export_timeout = export_timeout

    @classmethod
    def from_settings(cls, cfg: SourceSettings) -> "SesamReader":
        return cls(cfg.api, token=cfg.jwt, timeout=cfg.timeout, export_timeout=cfg.export_timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _get(self, path: str, timeout: float, stream: bool = False) -> requests.Response:
        url = self._url(path)
        try:
            resp = requests.get(url, headers=self._headers(), timeout=timeout, stream=stream)
        except requests.RequestException as e:
            log.error("GET %s failed: %s", url, e)
            raise TransportError(f"GET {url} failed: {e}") from e
        if resp.status_code != 200:
            body = "" if stream else getattr(resp, "text", "")
            if stream:
                resp.close()
            log.error("GET %s answered %s", url, resp.status_code)
            raise UpstreamStatusError(url, resp.status_code, body)
        return resp

    def get_json(self, path: str) -> Any:
        resp = self._get(path, self.timeout)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamStatusError(self._url(path), resp.status_code, f"invalid JSON: {e}") from e

    def metadata(self) -> Dict[str, Any]:
        return self.get_json("/metadata")

    def dataset_last_modified(self, dataset: str) -> Optional[str]:
        doc = self.get_json(f"/datasets/{dataset}")
        runtime = doc.get("runtime") if isinstance(doc, dict) else None
        value = runtime.get("last-modified") if isinstance(runtime, dict) else None
        return value if isinstance(value, str) else None

    def stream_entities(self, dataset: str) -> Iterator[Any]:
        """
        Yield entity objects from the export as they are decoded. The response
        body is never held in memory as a whole. A broken stream raises
        StreamDecodeError at the point it is hit. A body that does not
        open with a top-level array raises it before anything is yielded.
        """
        resp = self._get(f"/datasets/{dataset}/entities", self.export_timeout, stream=True)
        resp.raw.decode_content = True
        try:
            events = ijson.parse(resp.raw, use_float=True)
            first = next(events, None)
            if first is None or first[:2] != ("", "start_array"):
                found = "empty body" if first is None else first[1]
                raise StreamDecodeError(f"Entity stream for {dataset} is not a JSON array ({found})")
            for item in ijson.items(itertools.chain([first], events), "item"):
                yield item
        except ijson.JSONError as e:
            raise StreamDecodeError(f"Malformed entity stream for {dataset}: {e}") from e
        except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
            raise StreamDecodeError(f"Entity stream for {dataset} interrupted: {e}") from e
        finally:
            resp.close()

    def describe(self) -> Dict[str, object]:
        return {"api": self.base_url, "token": bool(self.token), "timeout": self.timeout}
