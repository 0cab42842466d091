import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


# Ensure project src is on path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for p in (ROOT, SRC):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from claimcheck.config import Settings  # noqa: E402
from claimcheck.reference import ReferenceData  # noqa: E402

DATA_DIR = ROOT / "data"
FIXED_NOW = datetime(2025, 3, 15, 9, 30, tzinfo=timezone.utc)
FACT_CHECKER_KEYS = ("FACTCHECK_LK_API_KEY", "WATCHDOG_API_KEY", "AFP_FACTCHECK_API_KEY")


class StubSearchClient:
    """Canned search results; records every query it receives."""

    def __init__(self, general=None, fact_checks=None, by_query=None):
        self.general = list(general or [])
        self.fact_checks = list(fact_checks or [])
        self.by_query = dict(by_query or {})
        self.queries = []

    @property
    def configured(self):
        return {"serpapi": False, "duckduckgo": False, "google_factcheck": False}

    async def search(self, query, language="en"):
        self.queries.append(("search", query, language))
        return list(self.by_query.get(query, self.general))

    async def search_fact_checks(self, query):
        self.queries.append(("fact-check", query, None))
        return list(self.fact_checks)


async def empty_feed(source):
    return []


async def valid_tls(url):
    return True


@pytest.fixture(autouse=True)
def _no_fact_checker_keys(monkeypatch):
    for name in FACT_CHECKER_KEYS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def reference():
    return ReferenceData.load(DATA_DIR)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        serpapi_api_key=None,
        google_factcheck_api_key=None,
        gemini_api_key=None,
        duckduckgo_fallback=False,
        strict_invariants=True,
        data_dir=DATA_DIR,
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
