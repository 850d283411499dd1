"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Segment Translator"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    # Database (page persistence)
    database_url: str = "sqlite+aiosqlite:///./segtrans.db"
    persist_results: bool = True

    # Authentication (optional - for network-exposed deployments)
    # Set API_AUTH_TOKEN to enable authentication on the batch endpoint
    api_auth_token: Optional[str] = None
    # If True, the streaming endpoint requires auth as well
    require_auth_all: bool = False

    # Model client
    llm_provider: str = "deepseek"
    llm_model: str = "deepseek-chat"
    llm_base_url: Optional[str] = "https://api.deepseek.com"
    llm_api_key: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    llm_temperature: float = 0.1
    llm_max_tokens: int = 4000
    llm_timeout_seconds: float = 120.0
    llm_max_attempts: int = 1  # 1 = no transport-level retry

    # Chunk engine
    segment_chunk_size: int = 3
    max_concurrent_chunks: int = 2
    wave_delay_seconds: float = 0.3
    paragraph_short_threshold: int = 300  # characters
    paragraph_max_chunk_chars: int = 200

    # Language defaults
    default_source_language: str = "zh-CN"
    default_target_language: str = "ko"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def resolved_api_key(self) -> Optional[str]:
        """API key for the configured provider (explicit key wins)."""
        return self.llm_api_key or self.deepseek_api_key


settings = Settings()
