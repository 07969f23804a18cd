"""Content fingerprinting for dedup."""

import hashlib


def content_hash(data: bytes) -> str:
    """SHA-256 hex digest of the file bytes."""
    return hashlib.sha256(data).hexdigest()
