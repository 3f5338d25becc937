from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Archive Hub"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    base_storage_dir: str = "./archive"
    file_size_limit: int = 1073741824  # 1 GiB

    # Pages rendered at the same time, shared by every request
    parallel_limit: int = 5
    # 0 disables the timeout
    playwright_timeout_ms: int = 30000
    queue_timeout: float = 300.0

    # Public base URL for artifact links (defaults to the request's own base)
    public_base_url: str = ""

    def archive_base(self, request_base: str) -> str:
        return (self.public_base_url or request_base).rstrip("/")


settings = Settings()
