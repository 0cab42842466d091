from datetime import datetime, timezone

import pytest

from claimcheck.analyzers.historical import HistoricalPatternMatcher, jaccard_similarity
from claimcheck.models import HistoricalClaimRecord
from claimcheck.reference import ReferenceData


def _reference(*records, seasons=None):
    return ReferenceData(catalog=tuple(records), seasons=seasons or {"election": (8, 9, 10, 11)})


def _record(ident, text, season=None):
    return HistoricalClaimRecord(
        id=ident,
        text=text,
        original_text=text,
        debunked_date="2024-01-01",
        category="political",
        season=season,
    )


def test_jaccard_ignores_case_and_punctuation():
    assert jaccard_similarity("Election POSTPONED!", "election postponed") == 1.0
    assert jaccard_similarity("", "") == 0.0


@pytest.mark.asyncio
async def test_recurring_pattern_adds_strong_penalty(clock):
    matcher = HistoricalPatternMatcher(_reference(_record("db1", "schools permanently closed nationwide")), clock=clock)
    result = await matcher.analyze("Schools permanently closed nationwide")
    assert result.delta == 0.25
    assert result.reasons == ("Similar to previously debunked claim (100% match)",)


@pytest.mark.asyncio
async def test_partial_match_adds_moderate_penalty(clock):
    matcher = HistoricalPatternMatcher(_reference(_record("db1", "fuel price increase tomorrow")), clock=clock)
    # 3 shared words out of 6 distinct -> 50%
    result = await matcher.analyze("Fuel price increase announced today")
    assert result.delta == 0.15
    assert "50% match" in result.reasons[0]


@pytest.mark.asyncio
async def test_weak_overlap_is_not_a_match(clock):
    matcher = HistoricalPatternMatcher(_reference(_record("db1", "banks closing withdrawals stopped")), clock=clock)
    result = await matcher.analyze("BREAKING!!! Banks will STOP all withdrawals tomorrow!!!")
    assert result.delta == 0.0
    assert result.reasons == ()


@pytest.mark.asyncio
async def test_seasonal_match_adds_bonus_in_season():
    record = _record("db4", "election postponed indefinitely cancelled", season="election")
    in_season = HistoricalPatternMatcher(
        _reference(record), clock=lambda: datetime(2024, 9, 1, tzinfo=timezone.utc)
    )
    out_of_season = HistoricalPatternMatcher(
        _reference(record), clock=lambda: datetime(2024, 3, 1, tzinfo=timezone.utc)
    )
    text = "Election postponed indefinitely"
    inside = await in_season.analyze(text)
    outside = await out_of_season.analyze(text)
    assert inside.delta == pytest.approx(outside.delta + 0.1)
    assert "Common fake news pattern for this time period" in inside.reasons
    assert inside.delta <= 0.35


def test_match_keeps_top_three_sorted(clock):
    records = [_record(f"db{i}", "banks closed " + "x" * i) for i in range(1, 6)]
    matcher = HistoricalPatternMatcher(_reference(*records), clock=clock)
    matches = matcher.match("banks closed")
    assert len(matches) == 3
    scores = [score for _, score in matches]
    assert scores == sorted(scores, reverse=True)


def test_catalog_stats_from_shipped_data(reference, clock):
    stats = HistoricalPatternMatcher(reference, clock=clock).catalog_stats()
    assert stats["total_claims"] == len(reference.catalog) > 0
    assert sum(stats["by_category"].values()) == stats["total_claims"]
    assert stats["version"] == reference.versions["debunked_claims"]
