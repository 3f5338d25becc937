"""
Archiver: normalizes a URL, renders it in the shared browser and stores
every artifact under <archive root>/<sha1 of normalized url>/.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from archive_hub.config import Settings
from archive_hub.models import ArchiveRecord
from archive_hub.services.gate import ConcurrencyGate, KeyedLocks
from archive_hub.services.savers import SaveTarget, select_saver
from archive_hub.services.session import FetchSession, check_declared_size
from archive_hub.storage.local import LocalArchiveStore
from archive_hub.utils import content_hash, normalize_url

logger = logging.getLogger(__name__)


class Archiver:
    def __init__(
        self,
        browser: Any,
        store: LocalArchiveStore,
        settings: Settings,
        gate: ConcurrencyGate | None = None,
        locks: KeyedLocks | None = None,
    ):
        self.browser = browser
        self.store = store
        self.settings = settings
        self.gate = gate or ConcurrencyGate(settings.parallel_limit, settings.queue_timeout)
        self.locks = locks or KeyedLocks()

    async def archive(self, url: str, base_url: str) -> ArchiveRecord:
        normalized = normalize_url(url)
        digest = content_hash(normalized)
        record = ArchiveRecord(
            url=url,
            normalized_url=normalized,
            content_hash=digest,
            folder=self.store.folder(digest),
            created_at=datetime.now(UTC),
        )
        target = SaveTarget(
            store=self.store,
            content_hash=digest,
            base_url=self.settings.archive_base(base_url),
            size_limit=self.settings.file_size_limit,
        )

        # Waiting on a busy hash must not hold a render slot
        async with self.locks.hold(digest), self.gate.slot():
            logger.info("Archiving %s -> %s", normalized, digest)
            async with FetchSession(self.browser, normalized, self.settings.playwright_timeout_ms) as session:
                check_declared_size(session.content_length, self.settings.file_size_limit)

                record.content_type = session.content_type
                saver = select_saver(session.content_type)
                logger.debug("Content-Type %r handled by %s saver", session.content_type, saver.name)
                record.artifacts = await saver.save(session, target)

        logger.info("Archived %s: %s", normalized, ", ".join(record.artifacts))
        return record
