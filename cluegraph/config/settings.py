"""
Settings - Application configuration using Pydantic Settings.

Loads from CLUEGRAPH_* environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ONTOLOGY_PATH = Path(__file__).resolve().parent.parent / "data" / "domain_ontology.ttl"


class Settings(BaseSettings):
    """Application settings."""

    # Remote knowledge graph
    endpoint_url: str = "https://dbpedia.org/sparql"
    user_agent: str = "cluegraph/1.0 (crossword clue solver)"
    resource_namespace: str = "http://dbpedia.org/resource/"
    language: str = "en"

    # Query limits and timeouts
    exact_result_limit: int = 200
    substring_result_limit: int = 100
    query_timeout_seconds: int = 30
    query_attempts: int = 3
    phase_timeout_seconds: float | None = None
    scoring_concurrency: int = 1

    # Clue handling
    max_fragment_words: int = 4
    extra_stop_words: list[str] = []

    # Domain ontology
    ontology_path: Path = DEFAULT_ONTOLOGY_PATH
    domain_namespace: str = "http://cluegraph.org/ontology/domain#"

    # Knowledge base
    knowledge_base_path: Path = Path("data/knowledge_base.rdf")
    knowledge_base_namespace: str = "http://cluegraph.org/kb#"
    create_knowledge_base_if_missing: bool = True

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CLUEGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
