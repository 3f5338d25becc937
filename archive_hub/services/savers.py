"""
Savers pick how a response is persisted from its content-type.

SAVERS is ordered; the first saver whose ``matches`` accepts the
(lower-cased) content-type handles the response. FallbackHtmlSaver accepts
everything and must stay last.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from archive_hub.services.session import FetchSession, check_body_size
from archive_hub.storage.base import ArchiveStore

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass
class SaveTarget:
    store: ArchiveStore
    content_hash: str
    base_url: str
    size_limit: int

    def filename(self, ext: str) -> str:
        return f"{self.content_hash}.{ext}"

    async def write(self, ext: str, data: bytes | str) -> str:
        name = self.filename(ext)
        await self.store.write(self.content_hash, name, data)
        return self.store.public_url(self.base_url, self.content_hash, name)


class Saver(ABC):
    name: str

    @abstractmethod
    def matches(self, content_type: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def save(self, session: FetchSession, target: SaveTarget) -> dict[str, str]:
        raise NotImplementedError


class HtmlSaver(Saver):
    """Rendered DOM, then A4 PDF, then full-page screenshot."""

    name = "html"

    def matches(self, content_type: str) -> bool:
        return "text/html" in content_type

    async def save(self, session: FetchSession, target: SaveTarget) -> dict[str, str]:
        saved: dict[str, str] = {}
        saved["html"] = await target.write("html", await session.rendered_html())
        saved["pdf"] = await target.write("pdf", await session.pdf())
        saved["screenshot"] = await target.write("png", await session.screenshot())
        return saved


class RawSaver(Saver):
    """Stores the response body untouched under a type-specific extension."""

    def __init__(self, name: str, *needles: str, prefix: str = "", ext: str = ""):
        self.name = name
        self.needles = needles
        self.prefix = prefix
        self.ext = ext

    def matches(self, content_type: str) -> bool:
        if self.prefix:
            return content_type.startswith(self.prefix)
        return any(n in content_type for n in self.needles)

    def extension(self, content_type: str) -> str:
        return self.ext

    async def save(self, session: FetchSession, target: SaveTarget) -> dict[str, str]:
        body = await session.body()
        check_body_size(body, target.size_limit)
        ext = self.extension(session.content_type.strip().lower())
        return {"file": await target.write(ext, body)}


class ImageSaver(RawSaver):
    def __init__(self):
        super().__init__("image", prefix="image/")

    def extension(self, content_type: str) -> str:
        if "jpeg" in content_type:
            return "jpg"
        if "gif" in content_type:
            return "gif"
        return "png"


class VideoSaver(RawSaver):
    _SUBTYPE = re.compile(r"^[a-z0-9][a-z0-9.+-]*$")

    def __init__(self):
        super().__init__("video", prefix="video/")

    def extension(self, content_type: str) -> str:
        subtype = content_type.split("/", 1)[1].split(";", 1)[0].strip()
        # subtype ends up in a filename
        if not self._SUBTYPE.match(subtype):
            return "mp4"
        return subtype


class OfficeSaver(RawSaver):
    """Legacy binary type or its OOXML successor, e.g. .xls vs .xlsx."""

    def __init__(self, name: str, legacy: str, ooxml: str, ext: str, ooxml_ext: str):
        super().__init__(name, legacy, ooxml, ext=ext)
        self.ooxml = ooxml
        self.ooxml_ext = ooxml_ext

    def extension(self, content_type: str) -> str:
        return self.ooxml_ext if self.ooxml in content_type else self.ext


class FallbackHtmlSaver(Saver):
    name = "fallback"

    def matches(self, content_type: str) -> bool:
        return True

    async def save(self, session: FetchSession, target: SaveTarget) -> dict[str, str]:
        return {"html": await target.write("html", await session.rendered_html())}


SAVERS: list[Saver] = [
    HtmlSaver(),
    RawSaver("pdf", "application/pdf", ext="pdf"),
    ImageSaver(),
    VideoSaver(),
    RawSaver("csv", "text/csv", ext="csv"),
    OfficeSaver("spreadsheet", "application/vnd.ms-excel", XLSX, "xls", "xlsx"),
    OfficeSaver("document", "application/msword", DOCX, "doc", "docx"),
    RawSaver("zip", "application/zip", ext="zip"),
    FallbackHtmlSaver(),
]


def select_saver(content_type: str | None) -> Saver:
    ct = (content_type or "").strip().lower()
    for saver in SAVERS:
        if saver.matches(ct):
            return saver
    raise LookupError(content_type)  # unreachable while FallbackHtmlSaver is last
