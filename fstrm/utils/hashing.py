# fstrm/utils/hashing.py
from __future__ import annotations

import hashlib
from pathlib import Path


def sha256_file(path: Path) -> str:
    """
    SHA256 of a protocol definition file, lowercase hex.
    Used to fingerprint the wire constants both peers agreed on.
    """
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(64 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()
