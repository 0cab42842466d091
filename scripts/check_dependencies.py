"""
Report which ClaimCheck dependencies are importable and at what version
"""

import importlib.util
import sys
from importlib import metadata

# (import name, distribution on the index, needed by)
DEPENDENCIES = [
    ("fastapi", "fastapi", "service"),
    ("uvicorn", "uvicorn", "service"),
    ("httpx", "httpx", "engine"),
    ("pydantic", "pydantic", "engine"),
    ("pydantic_settings", "pydantic-settings", "engine"),
    ("dotenv", "python-dotenv", "service"),
    ("tldextract", "tldextract", "engine"),
    ("feedparser", "feedparser", "realtime feeds"),
    ("duckduckgo_search", "duckduckgo_search", "search fallback"),
    ("cachetools", "cachetools", "engine"),
    ("pytest", "pytest", "tests"),
    ("pytest_asyncio", "pytest-asyncio", "tests"),
]


def installed_version(module: str, distribution: str):
    if importlib.util.find_spec(module) is None:
        return None
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return "unknown"


def main() -> int:
    width = max(len(dist) for _, dist, _ in DEPENDENCIES)
    missing = {}
    for module, dist, purpose in DEPENDENCIES:
        version = installed_version(module, dist)
        if version is None:
            missing.setdefault(purpose, []).append(dist)
        print(f"{dist:<{width}}  {version or 'MISSING':<10}  {purpose}")

    if not missing:
        print("\nAll dependencies are installed.")
        return 0

    print()
    for purpose, dists in missing.items():
        print(f"Missing for {purpose}: {', '.join(dists)}")
    print("Install with: pip install -e '.[test]'")
    # Only engine and service gaps are fatal; tests and fallbacks are optional.
    return 1 if set(missing) & {"engine", "service"} else 0


if __name__ == "__main__":
    sys.exit(main())
