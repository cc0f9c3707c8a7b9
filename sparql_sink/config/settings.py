# sparql_sink/config/settings.py
# Configuration for the SPARQL sink using pydantic-settings.
# Reads from environment variables and .env file, once, at process start.
from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------- Subsettings ----------
class SourceSettings(BaseSettings):
    """Source dataset platform (SESAM_API, SESAM_JWT, ...)."""
    api: str = ""
    jwt: str = ""
    timeout: float = 10.0
    export_timeout: float = 360.0

    model_config = SettingsConfigDict(env_prefix="SESAM_", extra="ignore")


class SparqlSettings(BaseSettings):
    endpoint: str = ""
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 10.0
    batch_size: int = Field(default=100, ge=1)

    model_config = SettingsConfigDict(env_prefix="SPARQL_", extra="ignore")


class GraphSettings(BaseSettings):
    base: str = ""

    model_config = SettingsConfigDict(env_prefix="GRAPH_", extra="ignore")


class ServiceSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 5000

    model_config = SettingsConfigDict(env_prefix="SERVICE_", extra="ignore")


# ---------- Unified Settings ----------
class Settings(BaseSettings):
    """Unified configuration for the sink (source + store + service)."""

    source: SourceSettings = Field(default_factory=SourceSettings)
    sparql: SparqlSettings = Field(default_factory=SparqlSettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)

    debug_level: str = Field(default="INFO", validation_alias="DEBUG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def log_level(self) -> int:
        return getattr(logging, (self.debug_level or "INFO").upper(), logging.INFO)

    def as_dict(self) -> dict:
        """For logging/debugging without leaking secrets (token and password masked)."""
        return {
            "source": {
                "api": self.source.api,
                "jwt": bool(self.source.jwt),  # masked
                "timeout": self.source.timeout,
                "export_timeout": self.source.export_timeout,
            },
            "sparql": {
                "endpoint": self.sparql.endpoint,
                "username": bool(self.sparql.username),
                "password": bool(self.sparql.password),  # masked
                "timeout": self.sparql.timeout,
                "batch_size": self.sparql.batch_size,
            },
            "graph": {"base": self.graph.base},
            "service": {"host": self.service.host, "port": self.service.port},
            "debug_level": self.debug_level,
        }


def load_settings() -> Settings:
    # Load .env if present (no-op if missing) so the subtrees see it too
    load_dotenv()
    return Settings()
