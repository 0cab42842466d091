"""
Curation helpers for the debunked-claims catalog. Used by operators through
scripts/add_debunked_claim.py; the evaluation pipeline only reads the file.
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from data_loader import load_json

from .models import HistoricalClaimRecord
from .text import normalize_words

logger = logging.getLogger(__name__)

CATALOG_FILE = "debunked_claims.json"
_ID_PATTERN = re.compile(r"^db(\d+)$")


def next_version(current: str | None, today: date) -> str:
    """``YYYY.MM.N``: bump N within the same month, otherwise restart at 1."""
    prefix = f"{today.year}.{today.month:02d}"
    if current and current.startswith(prefix + "."):
        try:
            return f"{prefix}.{int(current.rsplit('.', 1)[1]) + 1}"
        except ValueError:
            pass
    return f"{prefix}.1"


def next_claim_id(claims: Sequence[dict]) -> str:
    numbers = []
    for claim in claims:
        match = _ID_PATTERN.match(str(claim.get("id", "")))
        if match:
            numbers.append(int(match.group(1)))
    return f"db{max(numbers, default=0) + 1:03d}"


def keyword_text(original_text: str) -> str:
    return " ".join(normalize_words(original_text))


def append_debunked_claim(
    data_dir: str | os.PathLike[str],
    *,
    original_text: str,
    category: str = "other",
    season: str | None = None,
    sources: Sequence[str] = (),
    text: str | None = None,
    debunked_date: date | None = None,
) -> HistoricalClaimRecord:
    """Validate and append one record, then bump the catalog version."""
    path = Path(data_dir) / CATALOG_FILE
    payload = load_json(path) if path.exists() else {"version": None, "seasons": {}, "claims": []}
    claims = payload.setdefault("claims", [])
    today = debunked_date or date.today()

    record = HistoricalClaimRecord(
        id=next_claim_id(claims),
        text=text or keyword_text(original_text),
        original_text=original_text,
        debunked_date=today,
        category=category,
        season=season,
        sources=tuple(sources),
    )
    if season is not None and season not in payload.get("seasons", {}):
        raise ValueError(f"Season {season!r} has no calendar entry in {path.name}")

    claims.append(record.model_dump(mode="json"))
    payload["version"] = next_version(payload.get("version"), date.today())
    tmp_path = path.with_suffix(".json.tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")
    tmp_path.replace(path)
    logger.info("Added %s to %s (version %s)", record.id, path, payload["version"])
    return record
