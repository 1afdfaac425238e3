"""RS256 JWT-bearer assertion for Google service account auth."""

import json
import base64
import time
from typing import Any, Dict, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from .config import TOKEN_URL
from .credentials import load_private_key
from .models import ServiceCredential

JWT_HEADER = {"typ": "JWT", "alg": "RS256"}
ISSUED_AT_SKEW = 10
LIFETIME = 600


def b64url(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _encode_segment(obj: Dict[str, Any]) -> str:
    return b64url(json.dumps(obj, separators=(",", ":")))


def build_claims(account_email: str, scope: str, now: int) -> Dict[str, Any]:
    # iat is backdated to absorb clock skew with the token endpoint
    return {
        "aud": TOKEN_URL,
        "iat": now - ISSUED_AT_SKEW,
        "exp": now + LIFETIME,
        "iss": account_email,
        "scope": scope,
    }


def build_assertion(credential: ServiceCredential, now: Optional[int] = None) -> str:
    """Return ``header.payload.signature`` signed with the credential's key."""
    if now is None:
        now = int(time.time())

    header = _encode_segment(JWT_HEADER)
    payload = _encode_segment(build_claims(credential.account_email, credential.scope, now))
    signing_input = f"{header}.{payload}".encode("ascii")

    key = load_private_key(credential.private_key_bytes)
    signature = key.sign(signing_input, padding.PKCS1v15(), hashes.SHA256())

    return f"{header}.{payload}.{b64url(signature)}"
