import httpx
import pytest

from claimcheck.config import Settings
from claimcheck.errors import PhrasingFallbackError
from claimcheck.explanation import ExplanationAssembler, evidence_summary, render_template
from claimcheck.models import Analysis
from claimcheck.phrasing import PhrasingClient, build_prompt


def _analysis(verdict="fake", confidence=0.75, reasons=("Reason one", "Reason two")):
    return Analysis(claim_text="Banks will stop withdrawals", verdict=verdict, confidence=confidence, reasons=reasons)


def test_sections_follow_fixed_precedence():
    assembler = ExplanationAssembler()
    reasons = assembler.assemble(
        {
            "evidence": ["evidence"],
            "experts": ["expert"],
            "language": ["translated"],
            "historical": ["history"],
            "nlp": ["nlp"],
            "source_validation": ["publisher", "regional"],
            "linguistic": ["tone"],
            "realtime": ["feeds"],
        }
    )
    assert reasons == (
        "translated",
        "tone",
        "history",
        "publisher",
        "regional",
        "nlp",
        "expert",
        "feeds",
        "evidence",
    )


def test_duplicates_are_kept():
    reasons = ExplanationAssembler().assemble({"linguistic": ["same"], "nlp": ["same"]})
    assert reasons == ("same", "same")


def test_bounds_on_count_and_characters():
    assembler = ExplanationAssembler(max_reasons=3, max_chars=1000)
    assert len(assembler.assemble({"linguistic": [f"r{i}" for i in range(10)]})) == 3
    assembler = ExplanationAssembler(max_reasons=10, max_chars=12)
    assert assembler.assemble({"linguistic": ["12345", "67890", "abcde"]}) == ("12345", "67890")


def test_unknown_section_rejected():
    with pytest.raises(ValueError):
        ExplanationAssembler().assemble({"mystery": ["x"]})


def test_evidence_summary():
    assert evidence_summary(0, 0) == ["Limited verifiable sources found online for this claim"]
    assert evidence_summary(2, 1) == [
        "Found 2 source(s) from trusted news outlets",
        "Found 1 fact-checking article(s) addressing this claim",
    ]


def test_english_template():
    message = render_template(_analysis(), "en")
    assert message.startswith("Analysis complete. This claim appears to be **fake** with 75% confidence.")
    assert "Reason one\n\nReason two" in message
    assert message.endswith("*This is an automated estimation. Please verify with official sources.*")


def test_sinhala_and_tamil_templates():
    assert "**ව්‍යාජ**" in render_template(_analysis(), "si")
    assert "**உண்மை**" in render_template(_analysis(verdict="real"), "ta")


def test_unanalyzable_template():
    message = render_template(_analysis(verdict="unanalyzable", confidence=0.0, reasons=("Too short",)), "en")
    assert "**cannot be analyzed**" in message
    assert "0% confidence" in message


def test_prompt_includes_verdict_and_language():
    prompt = build_prompt(_analysis(), "si")
    assert "Respond in Sinhala" in prompt
    assert "Verdict: fake" in prompt
    assert "- Reason one" in prompt
    assert "too short" in build_prompt(_analysis(verdict="unanalyzable"), "en")


def _settings(**overrides):
    values = dict(_env_file=None, gemini_api_key="g-key", gemini_models=["model-a", "model-b"])
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio
async def test_phrasing_requires_api_key():
    client = PhrasingClient(settings=_settings(gemini_api_key=None))
    with pytest.raises(PhrasingFallbackError):
        await client.phrase(_analysis())


@pytest.mark.asyncio
async def test_phrasing_falls_back_to_next_model_on_rate_limit():
    models = []

    def handler(request: httpx.Request) -> httpx.Response:
        models.append(request.url.path.rsplit("/", 1)[-1])
        if "model-a" in request.url.path:
            return httpx.Response(429)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Phrased answer"}]}}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = PhrasingClient(settings=_settings(), client=http)
        assert await client.phrase(_analysis()) == "Phrased answer"
        # second call served from cache
        assert await client.phrase(_analysis()) == "Phrased answer"

    assert models == ["model-a:generateContent", "model-b:generateContent"]


@pytest.mark.asyncio
async def test_phrasing_malformed_response_raises_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = PhrasingClient(settings=_settings(), client=http)
        with pytest.raises(PhrasingFallbackError):
            await client.phrase(_analysis())


@pytest.mark.asyncio
async def test_phrasing_cache_is_bounded():
    prompts = []

    def handler(request: httpx.Request) -> httpx.Response:
        prompts.append(request.content)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Phrased"}]}}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = PhrasingClient(settings=_settings(cache_maxsize=1), client=http)
        first = _analysis(reasons=("First reason",))
        second = _analysis(reasons=("Second reason",))
        await client.phrase(first)
        await client.phrase(second)
        await client.phrase(first)

    assert len(prompts) == 3
