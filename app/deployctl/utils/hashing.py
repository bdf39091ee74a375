"""Content hashing helpers."""

import hashlib
from pathlib import Path

CHUNK_SIZE = 1024 * 1024


def sha1_file(path: Path) -> str:
    """Compute the hex SHA-1 digest of a file."""
    digest = hashlib.sha1()  # noqa: S324
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def parse_sha1_sidecar(text: str) -> str:
    """Extract the digest from a ``.sha1`` sidecar file.

    Accepts both a bare digest and the ``sha1sum`` output format
    (``<digest>  <filename>``).
    """
    fields = text.strip().split()
    return fields[0].lower() if fields else ""
