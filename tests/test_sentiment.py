from datetime import date

import pytest

from claimcheck.analyzers.sentiment import (
    SentimentEntityAnalyzer,
    analyze_sentiment,
    extract_entities,
    is_plausible_date,
    is_plausible_number,
)

TODAY = date(2025, 3, 15)


def test_fear_language_is_detected():
    profile = analyze_sentiment("Deadly virus outbreak, emergency warning issued")
    assert profile.sentiment == "fear"
    assert profile.emotional_score == 1.0


def test_neutral_text():
    profile = analyze_sentiment("The committee met on Tuesday to review the budget.")
    assert profile.sentiment == "neutral"
    assert profile.manipulation_score < 0.1


def test_date_plausibility_window():
    assert is_plausible_date(date(2024, 12, 1), TODAY)
    assert is_plausible_date(date(2026, 1, 1), TODAY)
    assert not is_plausible_date(date(2010, 1, 1), TODAY)
    assert not is_plausible_date(date(2030, 1, 1), TODAY)
    assert not is_plausible_date(None, TODAY)


def test_number_plausibility():
    assert is_plausible_number("1,250")
    assert is_plausible_number("1,250,000")
    assert not is_plausible_number("5,000,000")
    assert not is_plausible_number("2000000000000")


def test_entities_and_suspicious_figures():
    profile = extract_entities(
        "The president said on 12/01/2005 in Colombo that parliament lost 5,000,000 rupees.",
        TODAY,
    )
    assert "president" in profile.people
    assert "colombo" in profile.places
    assert "parliament" in profile.organizations
    assert profile.suspicious_dates == ["12/01/2005"]
    assert "5,000,000" in profile.suspicious_numbers


def test_month_first_dates_are_accepted():
    profile = extract_entities("Announced on 03/25/2025 and March 10, 2025.", TODAY)
    assert profile.date_count == 2
    assert profile.suspicious_dates == []


@pytest.mark.asyncio
async def test_adjustment_accumulates_and_stays_in_range(clock):
    analyzer = SentimentEntityAnalyzer(clock=clock)
    result = await analyzer.analyze(
        "DEADLY VIRUS EMERGENCY!!! Corrupt officials hid 10,000,000 deaths since 01/01/1990!!!"
    )
    assert 0.0 < result.delta <= 0.40
    assert any(reason.startswith("Fear triggers") for reason in result.reasons)
    assert any(reason.startswith("Suspicious numbers") for reason in result.reasons)
    assert any(reason.startswith("Suspicious dates") for reason in result.reasons)


@pytest.mark.asyncio
async def test_calm_text_is_neutral(clock):
    analyzer = SentimentEntityAnalyzer(clock=clock)
    result = await analyzer.analyze("The library will open an hour later on public holidays.")
    assert result.delta == 0.0
    assert result.reasons == ()
