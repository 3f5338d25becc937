from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass
class ArchiveRecord:
    url: str
    normalized_url: str
    content_hash: str
    folder: Path
    created_at: datetime
    content_type: str = ""
    artifacts: dict[str, str] = field(default_factory=dict)   # kind -> public URL
