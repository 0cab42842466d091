from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


class Settings(BaseSettings):
    """Configuration sourced from environment variables."""

    serpapi_api_key: str | None = None
    google_factcheck_api_key: str | None = None
    gemini_api_key: str | None = None
    gemini_models: list[str] = Field(
        default_factory=lambda: [
            "gemini-2.5-flash",
            "gemini-2.5-flash-lite",
            "gemini-2.0-flash-exp",
            "gemma-3-12b",
            "gemma-3-4b",
            "gemma-3-2b",
        ]
    )
    data_dir: Path = DEFAULT_DATA_DIR

    search_timeout: float = 10.0
    analyzer_timeout: float = 8.0
    fact_checker_timeout: float = 5.0
    feed_timeout: float = 5.0
    tls_probe_timeout: float = 3.0
    phrasing_timeout: float = 20.0

    duckduckgo_fallback: bool = True
    check_tls: bool = True
    strict_invariants: bool = False

    claim_display_length: int = 500
    evidence_display_count: int = 5
    search_query_length: int = 200
    max_reasons: int = 25
    max_reason_chars: int = 4000

    cache_maxsize: int = 1000
    cache_ttl: float = 3600.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache(1)
def get_settings() -> Settings:
    return Settings()
