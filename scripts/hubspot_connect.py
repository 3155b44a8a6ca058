#!/usr/bin/env python3
"""Connect a HubSpot portal to a locally running bridge and smoke test it.

1. Opens `<base-url>/hubspot/authorize?org_id=<org>` in the default browser.
2. Waits while you approve the app on HubSpot's consent screen.
3. Calls `POST <base-url>/hubspot/test?org_id=<org>` and prints the result.

Run: `python3 scripts/hubspot_connect.py --org-id acme`
"""
from __future__ import annotations

import argparse
import os
import sys
import webbrowser
from pathlib import Path

import httpx
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

DEFAULT_BASE_URL = f"http://localhost:{os.getenv('PORT', '3000')}"


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--org-id", default="demo-org")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--no-browser", action="store_true", help="only print the authorize URL")
    args = parser.parse_args()

    base_url = args.base_url.rstrip("/")
    authorize_url = httpx.URL(f"{base_url}/hubspot/authorize", params={"org_id": args.org_id})

    print("🔗 Authorize URL:")
    print(authorize_url)
    if not args.no_browser:
        webbrowser.open(str(authorize_url))

    input("\nPress Enter once HubSpot redirected you to the success page … ")

    print("🔄 Creating a test contact …")
    try:
        response = httpx.post(
            f"{base_url}/hubspot/test", params={"org_id": args.org_id}, timeout=30
        )
    except httpx.HTTPError as exc:
        print(f"❌ Could not reach the bridge at {base_url}: {exc}")
        print("   Make sure the app is running: python -m app.main")
        return 1

    try:
        body = response.json()
    except ValueError:
        body = {"ok": False, "error": response.text}
    if response.status_code != 200 or not body.get("ok"):
        print(f"❌ Test call failed: {body.get('error', body)}")
        return 1

    suffix = " (after one retry)" if body.get("retried") else ""
    print(f"✅ Created contact {body['id']} <{body['email']}> in portal {body.get('portal')}{suffix}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
