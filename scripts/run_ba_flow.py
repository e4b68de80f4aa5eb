#!/usr/bin/env python3
"""
Walk the billing agreement flow against a running API: create-token, (payer
approval), create-agreement, charge.

Needs the scripts extra: pip install -e ".[scripts]"

Start the API first (in another terminal):
  INTEGRATIONS_MODE=mock uvicorn src.api.main:app --host 127.0.0.1 --port 5174

Then run this script:
  python scripts/run_ba_flow.py
  python scripts/run_ba_flow.py --base-url http://127.0.0.1:5174 --amount 4.99 --currency EUR

Against the sandbox (INTEGRATIONS_MODE=real) the script stops after step A and
prints the approval URL; open it, approve as the sandbox buyer, then resume with:
  python scripts/run_ba_flow.py --token-id <token id>
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict


import requests


def post_json(url: str, data: Dict[str, Any], timeout: int = 30) -> Dict[str, Any]:
    r = requests.post(url, json=data, timeout=timeout)
    if not r.ok:
        raise requests.HTTPError(f"{r.status_code}: {r.text[:500]}", response=r)
    return r.json()


def get_json(url: str, timeout: int = 30) -> Dict[str, Any]:
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    return r.json()


def main() -> int:
    parser = argparse.ArgumentParser(description="Exercise the billing agreement API end to end")
    parser.add_argument("--base-url", default="http://localhost:5174", help="API base URL")
    parser.add_argument("--token-id", default=None, help="Resume from an approved agreement token")
    parser.add_argument("--amount", default=None, help="Charge amount (server default 10.00)")
    parser.add_argument("--currency", default=None, help="Charge currency (server default USD)")
    args = parser.parse_args()
    base = args.base_url.rstrip("/")

    print("=== Billing agreement flow ===\n")
    print(f"Base URL: {base}\n")

    try:
        health = get_json(f"{base}/health")
    except requests.RequestException as e:
        print(f"FAIL: {e}")
        print("   → Start the API first: uvicorn src.api.main:app --host 127.0.0.1 --port 5174")
        return 1
    mode = health.get("integrations_mode")
    print(f"Integrations mode: {mode}\n")

    token_id = args.token_id
    if not token_id:
        print("1) POST /api/ba/create-token")
        try:
            out = post_json(f"{base}/api/ba/create-token", {})
        except requests.RequestException as e:
            print(f"   FAIL: {e}")
            return 1
        token_id = out["id"]
        print(f"   token_id:    {token_id}")
        print(f"   approve_url: {out.get('approve_url')}\n")
        if mode != "mock":
            print("Approve the agreement in a browser, then rerun with --token-id", token_id)
            return 0

    print("2) POST /api/ba/create-agreement")
    try:
        out = post_json(f"{base}/api/ba/create-agreement", {"token_id": token_id})
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        return 1
    agreement_id = out["agreement_id"]
    print(f"   agreement_id: {agreement_id} (state={out.get('state')})\n")

    print("3) POST /api/ba/charge")
    payload: Dict[str, Any] = {"agreement_id": agreement_id}
    if args.amount:
        payload["amount"] = args.amount
    if args.currency:
        payload["currency"] = args.currency
    try:
        out = post_json(f"{base}/api/ba/charge", payload)
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        return 1
    capture = out.get("capture") or {}
    print(f"   order_id:   {out['order_id']}")
    print(f"   capture_id: {capture.get('id')} (status={capture.get('status')})\n")

    print(json.dumps(out, indent=2)[:2000])
    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
