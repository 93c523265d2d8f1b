#!/usr/bin/env python3
"""
Smoke test for a running automation gateway: health, checkout, generation, callback.

Start the API first (in another terminal):
  uvicorn src.api.main:app --host 127.0.0.1 --port 8787

Then run this script:
  python scripts/test_gateway_api.py --token <supabase access token> --item-id <music id>
  python scripts/test_gateway_api.py --callback-secret <secret> --purchase-id <purchase id>

Steps without the arguments they need are skipped. Nothing here mocks the
automation backend: checkout and generation hit the configured n8n webhooks.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, Optional

import requests


def post_json(url: str, data: Dict[str, Any], token: Optional[str] = None, timeout: int = 30) -> requests.Response:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return requests.post(url, json=data, headers=headers, timeout=timeout)


def show(response: requests.Response) -> None:
    print(f"   status: {response.status_code}")
    print(f"   body:   {response.text[:500]}\n")


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke test the automation gateway API")
    parser.add_argument("--base-url", default="http://localhost:8787", help="API base URL")
    parser.add_argument("--token", help="End-user bearer token (Supabase access token)")
    parser.add_argument("--item-id", help="Catalog music id to check out")
    parser.add_argument("--mode", default="inspiration", choices=["inspiration", "lyrics"])
    parser.add_argument("--callback-secret", help="Inbound shared secret for the purchase callback")
    parser.add_argument("--purchase-id", help="Purchase to mark as completed")
    args = parser.parse_args()
    base = args.base_url.rstrip("/")

    print("=== Automation gateway smoke test ===\n")
    print(f"Base URL: {base}\n")

    print("1) GET /api/health")
    try:
        r = requests.get(f"{base}/api/health", timeout=10)
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        print("   Start the API first: uvicorn src.api.main:app --host 127.0.0.1 --port 8787")
        return 1
    show(r)
    failed = r.status_code != 200

    print("2) POST /api/checkout (no token, expect 401)")
    r = post_json(f"{base}/api/checkout", {"itemId": args.item_id or "x"})
    show(r)
    failed = failed or r.status_code != 401

    if args.token and args.item_id:
        print("3) POST /api/checkout")
        r = post_json(f"{base}/api/checkout", {"itemId": args.item_id}, token=args.token)
        show(r)
        failed = failed or r.status_code != 200
    else:
        print("3) checkout skipped (needs --token and --item-id)\n")

    if args.token:
        print(f"4) POST /api/generation (mode={args.mode})")
        body = {"title": "Smoke test", "mode": args.mode, "theme": "Pop"}
        if args.mode == "lyrics":
            body["lyrics"] = "La la la, smoke test"
        else:
            body["inspiration_prompt"] = "synthwave night drive"
        r = post_json(f"{base}/api/generation", body, token=args.token)
        show(r)
        failed = failed or r.status_code not in (200, 422)
    else:
        print("4) generation skipped (needs --token)\n")

    if args.callback_secret and args.purchase_id:
        print("5) POST /api/purchases/callback")
        r = post_json(
            f"{base}/api/purchases/callback",
            {"purchase_id": args.purchase_id, "status": "concluido"},
            token=args.callback_secret,
        )
        show(r)
        failed = failed or r.status_code != 200
    else:
        print("5) purchase callback skipped (needs --callback-secret and --purchase-id)\n")

    print("FAILED" if failed else "OK")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
