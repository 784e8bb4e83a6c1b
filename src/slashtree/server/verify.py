"""Ed25519 request signature verification."""

from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def verify_key(body: bytes, signature: str, timestamp: str, public_key: str) -> bool:
    """
    Check a request signature against the application's public key.

    Discord signs ``timestamp + body``; signature and key are hex encoded.
    Malformed hex or keys count as a failed verification.
    """
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        key.verify(bytes.fromhex(signature), timestamp.encode() + body)
    except (InvalidSignature, ValueError):
        return False
    return True
