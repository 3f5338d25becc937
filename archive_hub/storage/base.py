from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class ArchiveStore(ABC):
    @abstractmethod
    async def write(self, content_hash: str, filename: str, data: bytes | str) -> Path:
        raise NotImplementedError

    @abstractmethod
    def public_url(self, base_url: str, content_hash: str, filename: str) -> str:
        raise NotImplementedError
