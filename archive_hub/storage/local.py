from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from archive_hub.errors import SaveError
from archive_hub.storage.base import ArchiveStore

logger = logging.getLogger(__name__)


class LocalArchiveStore(ArchiveStore):
    """Files live at <root>/<hash>/<filename>, served under /files."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def folder(self, content_hash: str) -> Path:
        return self.root / content_hash

    def path(self, content_hash: str, filename: str) -> Path:
        return self.folder(content_hash) / filename

    async def write(self, content_hash: str, filename: str, data: bytes | str) -> Path:
        target = self.path(content_hash, filename)
        try:
            await asyncio.to_thread(_write_file, target, data)
        except OSError as exc:
            raise SaveError(f"Could not write {filename}: {exc}") from exc
        logger.debug("Wrote %s", target)
        return target

    def public_url(self, base_url: str, content_hash: str, filename: str) -> str:
        return f"{base_url.rstrip('/')}/files/{content_hash}/{filename}"


def _write_file(target: Path, data: bytes | str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        target.write_text(data, encoding="utf-8")
    else:
        target.write_bytes(data)
