#!/usr/bin/env python3
"""
Append a newly debunked claim to data/debunked_claims.json.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from pydantic import ValidationError  # noqa: E402

from claimcheck.curation import append_debunked_claim  # noqa: E402

CATEGORIES = ["political", "health", "natural-disaster", "social", "economic", "other"]


def main() -> int:
    parser = argparse.ArgumentParser(description="Add a debunked claim to the catalog.")
    parser.add_argument("original_text", help="The claim as it circulated")
    parser.add_argument("--keywords", help="Normalized keyword text (default: derived from the claim)")
    parser.add_argument("--category", choices=CATEGORIES, default="other")
    parser.add_argument("--season", help="Seasonal tag, e.g. election or exam")
    parser.add_argument("--source", action="append", default=[], help="Debunking source domain (repeatable)")
    parser.add_argument("--date", type=date.fromisoformat, help="Debunk date YYYY-MM-DD (default: today)")
    parser.add_argument("--data-dir", default=str(ROOT / "data"))
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        record = append_debunked_claim(
            args.data_dir,
            original_text=args.original_text,
            text=args.keywords,
            category=args.category,
            season=args.season,
            sources=args.source,
            debunked_date=args.date,
        )
    except (ValidationError, ValueError) as exc:
        print(f"Rejected: {exc}", file=sys.stderr)
        return 1
    print(f"Added {record.id}: {record.text}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
