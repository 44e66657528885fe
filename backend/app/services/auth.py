"""
Signed admin requests.

Mutating endpoints expect two headers:
- ``X-Caller``: base58 public key of the caller
- ``X-Signature``: base58 ed25519 signature of ``"<METHOD> <path>\\n"``
  followed by the exact raw request body

The JSON body carries ``issued_at`` (unix seconds), which must be within
``settings.auth_max_age_seconds`` of the server clock, and a ``nonce`` that is
accepted once per caller. The verified public key is the identity the sale
checks against its owner.
"""

import json
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from fastapi import Header, HTTPException, Request, status
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from tortoise.exceptions import IntegrityError

from app.core.config import settings
from app.models.sale import RequestNonce

logger = logging.getLogger(__name__)

CALLER_HEADER = "X-Caller"
SIGNATURE_HEADER = "X-Signature"
MAX_NONCE_LENGTH = 64


class SignatureError(Exception):
    """Raised when a signed request cannot be authenticated."""


@dataclass(frozen=True)
class VerifiedRequest:
    caller: str
    nonce: str
    issued_at: int


def signing_message(method: str, path: str, body: bytes) -> bytes:
    """Bytes covered by the signature: request line, then the raw body."""
    return f"{method.upper()} {path}\n".encode("utf-8") + body


def verify_signed_body(
    caller: str,
    signature: str,
    method: str,
    path: str,
    body: bytes,
    now: Optional[int] = None,
) -> VerifiedRequest:
    """Verify the signature over the request and its freshness."""
    try:
        pubkey = Pubkey.from_string(caller)
    except Exception:
        raise SignatureError("Invalid caller public key")

    try:
        sig = Signature.from_string(signature)
    except Exception:
        raise SignatureError("Invalid signature encoding")

    if not sig.verify(pubkey, signing_message(method, path, body)):
        raise SignatureError("Signature verification failed")

    try:
        payload = json.loads(body)
        issued_at = int(payload["issued_at"])
        nonce = payload["nonce"]
    except (ValueError, TypeError, KeyError):
        raise SignatureError("Signed body must be a JSON object with issued_at and nonce")

    if not isinstance(nonce, str) or not nonce or len(nonce) > MAX_NONCE_LENGTH:
        raise SignatureError("Invalid nonce")

    now = int(time.time()) if now is None else now
    if abs(now - issued_at) > settings.auth_max_age_seconds:
        raise SignatureError("Signed request has expired")

    return VerifiedRequest(caller=str(pubkey), nonce=nonce, issued_at=issued_at)


async def consume_nonce(verified: VerifiedRequest, now: Optional[int] = None) -> None:
    """Record the nonce; raise SignatureError if the caller already used it."""
    now = int(time.time()) if now is None else now
    await RequestNonce.filter(issued_at__lt=now - settings.auth_max_age_seconds).delete()
    try:
        await RequestNonce.create(
            caller=verified.caller,
            nonce=verified.nonce,
            issued_at=verified.issued_at,
        )
    except IntegrityError:
        raise SignatureError("Request has already been used")


def build_signed_request(
    keypair: Keypair,
    method: str,
    path: str,
    payload: Dict[str, Any],
) -> Tuple[bytes, Dict[str, str]]:
    """Serialize ``payload`` (stamping issued_at and nonce if absent) and sign it for ``method path``."""
    payload = dict(payload)
    payload.setdefault("issued_at", int(time.time()))
    payload.setdefault("nonce", secrets.token_hex(16))
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    signature = keypair.sign_message(signing_message(method, path, body))
    headers = {
        CALLER_HEADER: str(keypair.pubkey()),
        SIGNATURE_HEADER: str(signature),
        "Content-Type": "application/json",
    }
    return body, headers


async def signed_caller(
    request: Request,
    x_caller: str = Header(..., alias=CALLER_HEADER),
    x_signature: str = Header(..., alias=SIGNATURE_HEADER),
) -> str:
    """FastAPI dependency resolving the authenticated caller."""
    body = await request.body()
    try:
        verified = verify_signed_body(x_caller, x_signature, request.method, request.url.path, body)
        await consume_nonce(verified)
    except SignatureError as e:
        logger.warning(f"rejected signed request from {x_caller}: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return verified.caller
