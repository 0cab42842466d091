"""
Dataset loader and regex compiler for the claim-check engine.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)

# dataset key -> (list field, pattern field) compiled into datasets["_compiled"]
PATTERN_GROUPS: Dict[str, Tuple[str, str]] = {
    "expert_topics": ("topics", "pattern"),
    "monitoring_sources": ("government", "pattern"),
}


def load_json(path: Path) -> Any:
    """Load a JSON file with UTF-8 encoding."""
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _compile_patterns(value: Any, field: str = "pattern") -> list[re.Pattern]:
    """Compile regex patterns from a list of strings or dicts carrying ``field``."""
    compiled: list[re.Pattern] = []
    if isinstance(value, list):
        for item in value:
            raw = item if isinstance(item, str) else item.get(field) if isinstance(item, dict) else None
            if not isinstance(raw, str):
                continue
            try:
                compiled.append(re.compile(raw, re.I | re.U))
            except re.error as exc:
                logger.warning("Skip invalid pattern %s: %s", raw, exc)
    return compiled


def compile_pattern_lists(datasets: Dict[str, Any]) -> Dict[str, list[re.Pattern]]:
    """
    Compile topic regexes (case-insensitive, unicode).
    Stores compiled patterns under datasets['_compiled'] and on each entry as
    ``_regex`` (entries with an invalid pattern get none).
    """
    compiled: Dict[str, list[re.Pattern]] = {}
    for key, (list_field, pattern_field) in PATTERN_GROUPS.items():
        group = datasets.get(key)
        if not isinstance(group, dict):
            continue
        patterns: list[re.Pattern] = []
        for entry in group.get(list_field) or []:
            compiled_entry = _compile_patterns([entry], pattern_field)
            if compiled_entry and isinstance(entry, dict):
                entry["_regex"] = compiled_entry[0]
            patterns.extend(compiled_entry)
        if patterns:
            compiled[key] = patterns
    datasets["_compiled"] = compiled
    return compiled


def _make_key(base: Path, path: Path) -> str:
    rel = path.relative_to(base)
    rel_no_suffix = rel.with_suffix("")
    return rel_no_suffix.as_posix().replace("/", "__")


def _dedup_list(values: Iterable[Any]) -> List[Any]:
    seen = set()
    output: List[Any] = []
    for val in values:
        key = json.dumps(val, sort_keys=True) if isinstance(val, (dict, list)) else val
        if key in seen:
            continue
        seen.add(key)
        output.append(val)
    return output


def _normalize_trusted_sources(datasets: Dict[str, Any]) -> Tuple[List[str], List[Dict[str, Any]]]:
    payload = datasets.get("trusted_sources")
    if not isinstance(payload, dict):
        payload = {}

    # Deduplicate by domain, keeping the highest curated trust
    merged: Dict[str, Dict[str, Any]] = {}
    for item in payload.get("sources", []) or []:
        domain = (item.get("domain") or "").lower().strip()
        if domain.startswith("www."):
            domain = domain[4:]
        if not domain:
            continue
        entry = {**item, "domain": domain, "trust_score": float(item.get("trust_score", 0.85))}
        current = merged.get(domain)
        if not current or entry["trust_score"] > current["trust_score"]:
            merged[domain] = entry

    normalized = list(merged.values())
    payload["sources"] = normalized
    for key in ("direct_publishers", "low_trust", "suspicious_tlds"):
        values = [str(v).lower().strip().lstrip(".") for v in payload.get(key, []) or []]
        payload[key] = _dedup_list(v for v in values if v)
    datasets["trusted_sources"] = payload
    return sorted(merged), normalized


def _normalize_catalog(datasets: Dict[str, Any]) -> int:
    catalog = datasets.get("debunked_claims")
    if not isinstance(catalog, dict):
        datasets["debunked_claims"] = {"version": "0", "seasons": {}, "claims": []}
        return 0
    claims = catalog.get("claims") or []
    seen: set[str] = set()
    unique: List[Dict[str, Any]] = []
    for claim in claims:
        ident = claim.get("id")
        if not ident or ident in seen:
            logger.warning("Skip catalog entry with missing or duplicate id: %s", ident)
            continue
        seen.add(ident)
        unique.append(claim)
    catalog["claims"] = unique
    catalog.setdefault("seasons", {})
    return len(unique)


def load_datasets(data_dir: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load all JSON files in data_dir into a dict keyed by stem.
    Compiles topic regexes for quick reuse.
    """
    data_path = Path(data_dir)
    datasets: Dict[str, Any] = {}

    if not data_path.exists():
        logger.warning("Data directory %s does not exist; using empty datasets", data_path)
        datasets["_compiled"] = {}
        return datasets

    files = sorted(data_path.rglob("*.json"))
    for fname in files:
        if fname.name == "dataset_manifest.json":
            continue
        key = _make_key(data_path, fname)
        try:
            datasets[key] = load_json(fname)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load dataset %s: %s", fname, exc)

    domains, trusted = _normalize_trusted_sources(datasets)
    catalog_size = _normalize_catalog(datasets)
    compile_pattern_lists(datasets)

    logger.info(
        "Loaded datasets (%d files). Trusted domains: %d, debunked catalog entries: %d",
        len(files),
        len(domains),
        catalog_size,
    )
    logger.info(
        "Trusted sources breakdown: %d regional, %d international",
        len([i for i in trusted if i.get("group") == "regional"]),
        len([i for i in trusted if i.get("group") == "international"]),
    )
    return datasets
