import pytest

from claimcheck.analyzers.regional import RegionalSignalAnalyzer, local_context, rumor_patterns


def test_rumor_patterns_capped():
    text = "URGENT PLEASE SHARE!!! DOCTOR SAID *FORWARDED* EVERYONE MUST KNOW!!"
    score, patterns = rumor_patterns(text)
    assert score == 0.3
    assert len(patterns) >= 4


def test_short_exclamations():
    score, patterns = rumor_patterns("Banks closing!! Tell everyone!")
    assert score == pytest.approx(0.08)
    assert patterns == ["Very short with multiple exclamation marks"]


def test_local_context_is_informational():
    context = local_context("Police in Kandy confirmed the arrest")
    assert "Sri Lankan location mentioned: kandy" in context
    assert "Sri Lankan institution mentioned: police" in context


@pytest.mark.asyncio
async def test_multiple_regional_sources_reduce_score(reference):
    analyzer = RegionalSignalAnalyzer(reference)
    result = await analyzer.analyze(
        "The ministry confirmed the new timetable for the national exams in a detailed statement.",
        ["https://www.newsfirst.lk/a", "https://www.adaderana.lk/b", "https://www.newsfirst.lk/c"],
    )
    assert result.delta == -0.15
    assert "Confirmed by 2 trusted Sri Lankan source(s)" in result.reasons


@pytest.mark.asyncio
async def test_single_regional_source(reference):
    analyzer = RegionalSignalAnalyzer(reference)
    result = await analyzer.analyze(
        "The ministry confirmed the new timetable for the national exams in a detailed statement.",
        ["https://www.dailymirror.lk/a", "https://www.bbc.com/b"],
    )
    assert result.delta == -0.05


@pytest.mark.asyncio
async def test_international_sources_do_not_count(reference):
    analyzer = RegionalSignalAnalyzer(reference)
    result = await analyzer.analyze(
        "The ministry confirmed the new timetable for the national exams in a detailed statement.",
        ["https://www.bbc.com/b"],
    )
    assert result.delta == 0.0
