import pytest

from archive_hub.config import Settings


@pytest.fixture
def config(tmp_path):
    return Settings(
        base_storage_dir=str(tmp_path / "archive"),
        parallel_limit=5,
        queue_timeout=5.0,
        public_base_url="",
    )
