import httpx
import pytest

from claimcheck.config import Settings
from claimcheck.evidence import classify_links, merge_results
from claimcheck.models import EvidenceLink
from claimcheck.sources import EvidenceSearchClient


def _link(url, title, snippet=None, source=None, rating=None, confidence=None):
    return EvidenceLink(
        title=title,
        url=url,
        source=source or httpx.URL(url).host.removeprefix("www."),
        snippet=snippet,
        rating=rating,
        confidence=confidence,
    )


def test_debunk_keywords_route_to_debunk(reference):
    link = _link("https://example.com/a", "Viral bank claim is a hoax")
    evidence = classify_links([link], [], reference)
    assert [l.url for l in evidence.debunk_links] == ["https://example.com/a"]
    assert evidence.debunk_links[0].confidence == 0.75
    assert evidence.support_links == ()


def test_support_keywords_on_trusted_domain(reference):
    link = _link("https://www.adaderana.lk/news/1", "Ministry statement on vaccination")
    evidence = classify_links([link], [], reference)
    assert evidence.support_links[0].confidence == 0.95


def test_ambiguous_result_kept_only_for_trusted_domains(reference):
    trusted = _link("https://www.reuters.com/x", "Markets open higher")
    unknown = _link("https://randomblog.net/x", "Markets open higher")
    evidence = classify_links([trusted, unknown], [], reference)
    assert [l.url for l in evidence.support_links] == ["https://www.reuters.com/x"]
    assert evidence.support_links[0].confidence == 0.75
    assert evidence.debunk_links == ()


def test_low_trust_domain_is_capped(reference):
    link = _link("https://infowars.com/story", "Officials confirmed the plan")
    evidence = classify_links([link], [], reference)
    assert evidence.support_links[0].confidence == pytest.approx(0.45)


def test_fact_check_ratings(reference):
    checks = [
        _link("https://factcheck.org/1", "Claim", rating="False", confidence=0.9),
        _link("https://factcheck.org/2", "Claim", rating="Accurate", confidence=0.9),
        _link("https://factcheck.org/3", "Claim", rating="Needs context", confidence=0.9),
    ]
    evidence = classify_links([], checks, reference)
    assert [l.url for l in evidence.debunk_links] == ["https://factcheck.org/1", "https://factcheck.org/3"]
    assert evidence.debunk_links[1].confidence == 0.85
    assert [l.url for l in evidence.support_links] == ["https://factcheck.org/2"]


def test_url_is_placed_once(reference):
    general = _link("https://www.bbc.com/news/1", "Government said the plan is on track")
    check = _link("https://www.bbc.com/news/1", "Same story", rating="False")
    evidence = classify_links([general], [check], reference)
    assert set(evidence.urls) == {"https://www.bbc.com/news/1"}
    assert evidence.debunk_links == ()


def test_classification_does_not_mutate_inputs(reference):
    link = _link("https://example.com/a", "This is fake news")
    classify_links([link], [], reference)
    assert link.confidence is None


def test_subdomains_match_but_lookalikes_do_not(reference):
    assert reference.is_trusted("news.bbc.co.uk")
    assert not reference.is_trusted("notbbc.com")
    assert not reference.is_trusted("bbc.com.evil.xyz")


def test_merge_results_keeps_first_occurrence():
    a = _link("https://a.com/1", "first")
    b = _link("https://a.com/1", "second")
    c = _link("https://b.com/1", "third")
    merged = merge_results([a], [b, c])
    assert [l.title for l in merged] == ["first", "third"]


def _settings(**overrides):
    values = dict(
        _env_file=None,
        serpapi_api_key="serp-key",
        google_factcheck_api_key="fc-key",
        duckduckgo_fallback=False,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio
async def test_serpapi_search_uses_regional_parameters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(
            200,
            json={
                "organic_results": [
                    {"title": "Story", "link": "https://www.newsfirst.lk/story", "snippet": "Reported today"},
                    {"title": "No link"},
                ]
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        search = EvidenceSearchClient(settings=_settings(), client=client)
        results = await search.search("x" * 300, "si")

    assert seen["gl"] == "lk"
    assert seen["hl"] == "si"
    assert len(seen["q"]) == 200
    assert [r.source for r in results] == ["newsfirst.lk"]


@pytest.mark.asyncio
async def test_fact_check_search_maps_first_review():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "claims": [
                    {
                        "text": "Banks stop withdrawals",
                        "claimReview": [
                            {
                                "url": "https://factcheck.lk/banks",
                                "publisher": {"name": "FactCheck.lk"},
                                "textualRating": "False",
                                "title": "No, banks are not stopping withdrawals",
                            }
                        ],
                    },
                    {"text": "No reviews"},
                ]
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        search = EvidenceSearchClient(settings=_settings(), client=client)
        results = await search.search_fact_checks("banks stop withdrawals")

    assert len(results) == 1
    assert results[0].rating == "False"
    assert results[0].source == "FactCheck.lk"
    assert results[0].confidence == 0.9


@pytest.mark.asyncio
async def test_search_failures_return_empty_lists():
    def handler(request: httpx.Request) -> httpx.Response:
        if "serpapi" in request.url.host:
            return httpx.Response(500)
        return httpx.Response(200, content=b"not json")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        search = EvidenceSearchClient(settings=_settings(), client=client)
        assert await search.search("claim") == []
        assert await search.search_fact_checks("claim") == []


@pytest.mark.asyncio
async def test_missing_keys_skip_remote_calls():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        search = EvidenceSearchClient(
            settings=_settings(serpapi_api_key=None, google_factcheck_api_key=None),
            client=client,
        )
        assert await search.search("claim") == []
        assert await search.search_fact_checks("claim") == []
