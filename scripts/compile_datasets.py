#!/usr/bin/env python3
"""
Quick validation/compilation for dataset JSON files.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from data_loader import load_datasets  # noqa: E402
from claimcheck.reference import ReferenceData  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate and compile ClaimCheck datasets.")
    parser.add_argument(
        "--data-dir",
        default=str(ROOT / "data"),
        help="Path to dataset directory (default: ./data)",
    )
    args = parser.parse_args()

    datasets = load_datasets(args.data_dir)
    compiled = datasets.get("_compiled", {})
    names = [k for k in datasets.keys() if not k.startswith("_")]

    print(f"Loaded {len(names)} datasets from {args.data_dir}")
    reference = ReferenceData.from_datasets(datasets)
    print(f" - trusted sources: {len(reference.trusted_sources)}")
    print(f" - direct publishers: {len(reference.direct_publishers)}")
    print(f" - debunked catalog: {len(reference.catalog)} entries, seasons: {', '.join(reference.seasons) or 'none'}")
    print(f" - fact-checker endpoints: {len(reference.fact_checkers)}")
    print(f" - expert topics: {len(reference.expert_topics)}")
    print(f" - monitored sources: {len(reference.government_sources)} government, {len(reference.news_feeds)} news")

    raw_claims = (datasets.get("debunked_claims") or {}).get("claims", [])
    rejected = len(raw_claims) - len(reference.catalog)
    if rejected:
        print(f"\n{rejected} catalog entries failed validation (see log)")

    print(f"\nCompiled pattern groups: {', '.join(compiled.keys()) or 'none'}")
    for key, patterns in compiled.items():
        print(f" - {key}: {len(patterns)} regex patterns")

    # Write a simple manifest for tooling/debugging
    manifest_path = Path(args.data_dir) / "dataset_manifest.json"
    manifest = {
        "datasets": names,
        "versions": reference.versions,
        "compiled_groups": {k: len(v) for k, v in compiled.items()},
    }
    manifest_path.write_text(json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"\nManifest written to {manifest_path}")
    return 1 if rejected else 0


if __name__ == "__main__":
    raise SystemExit(main())
