#!/usr/bin/env python3
"""
sale_admin.py - Send signed owner requests to the StageSale API.

Every mutating request (method, path and body, with a fresh nonce) is signed
with the admin keypair; the API checks the signature and then checks that the
signer is the sale owner.

Usage:
    python scripts/sale_admin.py status
    python scripts/sale_admin.py allocate <recipient> <quantity> [--value VALUE]
    python scripts/sale_admin.py set-date <stage> <start|end> <unix_ts>
    python scripts/sale_admin.py terminate
    python scripts/sale_admin.py transfer-ownership <new_owner>
    python scripts/sale_admin.py renounce

Examples:
    python scripts/sale_admin.py set-date pre_sale end 1805500000
    python scripts/sale_admin.py allocate 9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin 1000000000
"""

import argparse
import json
import os
import secrets
import sys
import time
from pathlib import Path

import base58
import httpx
from dotenv import load_dotenv
from solders.keypair import Keypair

# ── Paths ──────────────────────────────────────────────────────
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent

DEFAULT_API_URL = "http://localhost:8000/api/v1"
STAGES = ("private_sale", "pre_sale", "main_sale")

# ── Colors ─────────────────────────────────────────────────────
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
RED = "\033[0;31m"
CYAN = "\033[0;36m"
NC = "\033[0m"


def log(msg: str) -> None:
    print(f"{CYAN}[sale_admin]{NC} {msg}")


def ok(msg: str) -> None:
    print(f"{GREEN}[  ok  ]{NC} {msg}")


def err(msg: str) -> None:
    print(f"{RED}[error ]{NC} {msg}", file=sys.stderr)


def load_env() -> None:
    """Load .env from project root or backend."""
    for env_path in (PROJECT_ROOT / ".env", PROJECT_ROOT / "backend" / ".env"):
        if env_path.exists():
            load_dotenv(env_path)
            return


def get_admin_keypair() -> Keypair:
    """Load admin keypair from ADMIN_PRIVATE_KEY env var."""
    private_key = os.environ.get("ADMIN_PRIVATE_KEY", "")
    if not private_key:
        err("ADMIN_PRIVATE_KEY not set in .env")
        sys.exit(1)

    try:
        return Keypair.from_bytes(base58.b58decode(private_key))
    except Exception as e:
        err(f"Invalid ADMIN_PRIVATE_KEY: {e}")
        sys.exit(1)


def send_signed(client: httpx.Client, method: str, path: str, payload: dict, keypair: Keypair) -> dict:
    """Sign method, full URL path and JSON body with the admin key and send it."""
    payload = {**payload, "issued_at": int(time.time()), "nonce": secrets.token_hex(16)}
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    request = client.build_request(method, path, content=body, headers={"Content-Type": "application/json"})

    # The server verifies against the path it sees, API prefix included
    message = f"{method} {request.url.path}\n".encode("utf-8") + body
    request.headers["X-Caller"] = str(keypair.pubkey())
    request.headers["X-Signature"] = str(keypair.sign_message(message))

    resp = client.send(request)
    if resp.status_code >= 400:
        err(f"{method} {path} -> {resp.status_code}: {resp.text}")
        sys.exit(1)
    return resp.json()


def main() -> None:
    parser = argparse.ArgumentParser(description="StageSale owner operations")
    parser.add_argument("--api-url", default=None, help=f"API base URL (default: {DEFAULT_API_URL})")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show the current stage")

    p_alloc = sub.add_parser("allocate", help="Allocate tokens in the current stage")
    p_alloc.add_argument("recipient")
    p_alloc.add_argument("quantity", type=int, help="Smallest token units")
    p_alloc.add_argument("--value", type=int, default=0, help="Informational payment value")

    p_date = sub.add_parser("set-date", help="Move a stage boundary")
    p_date.add_argument("stage", choices=STAGES)
    p_date.add_argument("boundary", choices=("start", "end"))
    p_date.add_argument("value", type=int, help="Unix timestamp")

    sub.add_parser("terminate", help="End the sale and burn unsold tokens")

    p_owner = sub.add_parser("transfer-ownership", help="Hand the sale to another key")
    p_owner.add_argument("new_owner")

    sub.add_parser("renounce", help="Renounce ownership (irreversible)")

    args = parser.parse_args()

    load_env()
    api_url = args.api_url or os.environ.get("SALE_API_URL", DEFAULT_API_URL)
    log(f"API: {YELLOW}{api_url}{NC}")

    with httpx.Client(base_url=api_url, timeout=30.0) as client:
        if args.command == "status":
            resp = client.get("/sale/status")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        keypair = get_admin_keypair()
        log(f"Admin: {keypair.pubkey()}")

        if args.command == "allocate":
            result = send_signed(client, "POST", "/sale/allocations", {
                "recipient": args.recipient,
                "quantity": args.quantity,
                "value": args.value,
            }, keypair)
        elif args.command == "set-date":
            result = send_signed(
                client, "PUT", f"/sale/stages/{args.stage}/{args.boundary}",
                {"value": args.value}, keypair,
            )
        elif args.command == "terminate":
            result = send_signed(client, "POST", "/sale/terminate", {}, keypair)
        elif args.command == "transfer-ownership":
            result = send_signed(client, "POST", "/sale/ownership/transfer", {"new_owner": args.new_owner}, keypair)
        else:
            result = send_signed(client, "POST", "/sale/ownership/renounce", {}, keypair)

    ok(json.dumps(result))


if __name__ == "__main__":
    main()
