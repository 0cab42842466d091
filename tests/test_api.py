"""
API endpoint tests
"""

import httpx
import pytest

import main
from conftest import StubSearchClient
from test_engine import BANKS_CLAIM, BANKS_FACT_CHECK, _evaluator


@pytest.fixture
def stub_evaluator(reference, settings, clock):
    return _evaluator(reference, settings, clock, StubSearchClient(fact_checks=[BANKS_FACT_CHECK]))


def _client():
    transport = httpx.ASGITransport(app=main.app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.asyncio
async def test_service_endpoints(stub_evaluator):
    async with main.lifespan(main.app):
        main.app.state.evaluator = stub_evaluator
        async with _client() as client:
            root = await client.get("/")
            assert root.status_code == 200
            assert root.json()["endpoints"]["evaluate"] == "POST /evaluate"

            health = await client.get("/health")
            assert health.status_code == 200
            assert health.json()["components"]["reference_data"]["catalog_entries"] > 0

            metrics = await client.get("/metrics")
            assert "metrics" in metrics.json()

            sources = await client.get("/sources/status")
            assert set(sources.json()["fact_checkers"]) == {"factcheck.lk", "watchdog.team", "AFP FactCheck"}
            assert sources.json()["phrasing"]["gemini"] is False

            stats = await client.get("/catalog/stats")
            assert stats.json()["total_claims"] > 0


@pytest.mark.asyncio
async def test_evaluate_endpoint(stub_evaluator):
    async with main.lifespan(main.app):
        main.app.state.evaluator = stub_evaluator
        async with _client() as client:
            response = await client.post("/evaluate", json={"text": BANKS_CLAIM, "language": "en"})
            assert response.status_code == 200
            data = response.json()
            assert data["analysis"]["verdict"] == "fake"
            assert data["analysis"]["debunk_links"][0]["url"] == BANKS_FACT_CHECK.url
            assert data["message"].startswith("Analysis complete.")
            assert data["processing_time"] >= 0

            follow_up = await client.post(
                "/evaluate",
                json={"text": "Why is it fake?", "previous_analysis": data["analysis"]},
            )
            assert follow_up.json()["analysis"] == data["analysis"]

            short = await client.post("/evaluate", json={"text": "Colombo"})
            assert short.json()["analysis"]["verdict"] == "unanalyzable"

            stats = (await client.get("/metrics")).json()["metrics"]
            assert stats["verdicts"]["fake"] >= 1
            assert stats["verdicts"]["unanalyzable"] >= 1
            assert stats["errors"] == 0


@pytest.mark.asyncio
async def test_evaluate_validation(stub_evaluator):
    async with main.lifespan(main.app):
        main.app.state.evaluator = stub_evaluator
        async with _client() as client:
            bad_language = await client.post("/evaluate", json={"text": BANKS_CLAIM, "language": "fr"})
            assert bad_language.status_code == 422

            missing_origin = await client.post(
                "/evaluate", json={"text": BANKS_CLAIM, "translated_text": "Banks will stop withdrawals"}
            )
            assert missing_origin.status_code == 422

            empty = await client.post("/evaluate", json={"text": ""})
            assert empty.status_code == 422
