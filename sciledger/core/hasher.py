"""Content fingerprint helpers for the hash index.

Fingerprints are raw 32-byte SHA-256 digests. The hash index and the
SQLite store key them by lowercase hex.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

HASH_LENGTH = 32


def fingerprint_file(path: Path) -> bytes:
    """Fingerprint a file's contents, reading in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            digest.update(chunk)
    return digest.digest()


def hash_key(data_hash: bytes) -> str:
    """Index key for a fingerprint."""
    return data_hash.hex()


def hash_from_hex(text: str) -> bytes:
    """Decode a hex fingerprint, tolerating a ``0x`` prefix.

    Length is not checked here; the registry reports ``InvalidHash``.
    """
    text = text.strip()
    if text.startswith(("0x", "0X")):
        text = text[2:]
    return bytes.fromhex(text)
