"""
Smoke check for the AI scoring endpoints against a running server.

It will:
- Login (if email/password provided) or use a provided ACCESS TOKEN
- Print provider health
- Score one read-aloud transcript and one short essay

Usage:
  python scripts/smoke_scoring.py --email you@example.com --password yourpass
  ACCESS_TOKEN=<your JWT> python scripts/smoke_scoring.py --base-url http://localhost:8101/api/v1
"""

from __future__ import annotations

import argparse
import json
import os
import sys

import requests

READ_ALOUD_TEXT = (
    "The development of technology has significantly impacted how people live and work "
    "in the 21st century."
)
ESSAY = (
    "Technology has changed how we work. Remote tools let teams collaborate across "
    "countries, and automation removes repetitive tasks. However, constant connectivity "
    "blurs the line between work and rest."
)


def _login(base_url: str, email: str, password: str) -> str:
    r = requests.post(f"{base_url}/auth/login", json={"email": email, "password": password}, timeout=30)
    r.raise_for_status()
    token = (r.json().get("data") or {}).get("access_token")
    if not token:
        raise RuntimeError(f"Login succeeded but no access_token found: {r.text}")
    return token


def _call(method: str, url: str, token: str, payload: dict | None = None) -> dict:
    r = requests.request(
        method, url, headers={"Authorization": f"Bearer {token}"}, json=payload, timeout=120
    )
    body = r.json()
    print(f"{method} {url} -> {r.status_code}")
    print(json.dumps(body, indent=2)[:2000])
    return body


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke check AI scoring")
    parser.add_argument("--base-url", default=os.getenv("API_BASE_URL", "http://localhost:8101/api/v1"))
    parser.add_argument("--email")
    parser.add_argument("--password")
    args = parser.parse_args()

    token = os.getenv("ACCESS_TOKEN")
    if not token:
        if not (args.email and args.password):
            print("Provide ACCESS_TOKEN or --email/--password", file=sys.stderr)
            return 2
        token = _login(args.base_url, args.email, args.password)

    _call("GET", f"{args.base_url}/score/providers", token)
    speaking = _call(
        "POST",
        f"{args.base_url}/score/speaking",
        token,
        {
            "type": "read_aloud",
            "transcript": READ_ALOUD_TEXT.replace("significantly ", ""),
            "prompt_text": READ_ALOUD_TEXT,
            "duration_ms": 12000,
        },
    )
    writing = _call(
        "POST",
        f"{args.base_url}/score/writing",
        token,
        {"type": "write_essay", "response_text": ESSAY, "prompt_text": "Discuss technology at work."},
    )
    ok = speaking.get("status") == "success" and writing.get("status") == "success"
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
