"""Application configuration loaded from environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Documents
    display_url_scheme: str = "dbconnector"
    max_document_size: int = 30 * 1024 * 1024
    lob_spool_threshold: int = 1024 * 1024
    lob_read_chunk_size: int = 64 * 1024

    # Logging
    log_level: str = "INFO"

    # Paths (relative to project root)
    connectors_dir: str = "connectors"

    @property
    def project_root(self) -> Path:
        return Path(__file__).parent.parent.parent

    model_config = {"env_file": ".env", "env_prefix": "DBFEED_", "extra": "ignore"}


settings = Settings()
