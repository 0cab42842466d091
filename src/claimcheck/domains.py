from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

import tldextract

# Bundled public suffix snapshot only; no network fetch at runtime.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


def hostname(url: str) -> str:
    """Lowercased host of a URL without a leading ``www.``."""
    if not url:
        return ""
    try:
        host = urlparse(url if "://" in url else f"http://{url}").hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def public_suffix(url: str) -> str:
    return _EXTRACT(url).suffix.lower()


def domain_matches(domain: str, candidates: Iterable[str]) -> bool:
    """Exact or subdomain match against a list of curated domains."""
    if not domain:
        return False
    domain = domain.lower()
    return any(domain == c or domain.endswith("." + c) for c in candidates)


def is_https(url: str) -> bool:
    return url.lower().startswith("https://")
