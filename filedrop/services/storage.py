"""Local-disk byte store for uploads. The database only keeps the stored name."""

import logging
import os
import secrets
from pathlib import Path, PurePath

logger = logging.getLogger(__name__)

# Stored names keep the client's extension when it is short and plain.
MAX_SUFFIX_LEN = 16


def make_stored_name(original_name: str) -> str:
    """Random stored name that keeps a sane suffix from the client's filename."""
    suffix = PurePath(original_name).suffix.lower()
    if len(suffix) > MAX_SUFFIX_LEN or not suffix[1:].isalnum():
        suffix = ""
    return f"{secrets.token_urlsafe(12)}{suffix}"


class LocalFileStore:
    """Writes and removes upload bytes under one root directory."""

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)

    def path_for(self, name: str) -> Path:
        path = (self.root / name).resolve()
        if path.parent != self.root.resolve():
            raise ValueError(f"Stored name escapes the upload directory: {name!r}")
        return path

    def save(self, name: str, data: bytes) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        tmp = path.with_name(path.name + ".part")
        tmp.write_bytes(data)
        os.replace(tmp, path)
        return path

    def delete(self, name: str) -> None:
        try:
            self.path_for(name).unlink()
        except FileNotFoundError:
            logger.info("Stored file %s already gone", name)
