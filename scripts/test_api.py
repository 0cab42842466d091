"""
Smoke-test a running ClaimCheck service (default http://localhost:8001)
"""

import asyncio
import sys

import httpx

SAMPLE_CLAIMS = [
    "BREAKING!!! Banks will STOP all withdrawals tomorrow!!!",
    "Colombo",
]

CHECKS = [
    ("GET", "/health", None),
    ("GET", "/metrics", None),
    ("GET", "/sources/status", None),
    ("GET", "/catalog/stats", None),
] + [("POST", "/evaluate", {"text": claim, "language": "en"}) for claim in SAMPLE_CLAIMS]


def describe(path, body):
    if path != "/evaluate":
        return body
    analysis = body.get("analysis", {})
    lines = [f"{analysis.get('verdict')} (confidence {analysis.get('confidence')})"]
    lines += [f"  - {reason}" for reason in analysis.get("reasons", [])]
    lines.append(body.get("message", ""))
    return "\n".join(lines)


async def run(base_url):
    failures = 0
    async with httpx.AsyncClient(base_url=base_url, timeout=60.0) as client:
        for method, path, payload in CHECKS:
            try:
                response = await client.request(method, path, json=payload)
            except httpx.HTTPError as exc:
                print(f"{method} {path}: request failed: {exc}")
                failures += 1
                continue
            print(f"{method} {path}: {response.status_code}")
            if response.is_success:
                print(describe(path, response.json()))
            else:
                failures += 1
            print()
    print(f"{len(CHECKS) - failures}/{len(CHECKS)} checks passed")
    return failures


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8001"
    sys.exit(1 if asyncio.run(run(url)) else 0)
