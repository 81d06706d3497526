"""Configuration via pydantic-settings. Reads from .env or environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ===== BACKEND SELECTION =====
    # auth: bearer token | fingerprint: X-Session-ID/X-Fingerprint | anonymous | mock
    backend_mode: str = "auth"
    api_base_url: str = "https://cognitive-persuasion-backend.onrender.com"
    request_timeout: float = 30.0

    # ===== MOCK BACKEND =====
    mock_database_url: str = "sqlite+aiosqlite://"  # in-memory by default
    mock_latency: float = 0.0  # seconds added to every mock call

    # ===== AUTH =====
    token_store_path: str = ".persuasion_token.json"

    # ===== LIVE SESSION (seconds) =====
    agent_min_delay: float = 2.0
    agent_max_delay: float = 5.0
    agent_gap: float = 0.5
    regenerate_delay: float = 2.0

    # ===== CONVERSATION DASHBOARD =====
    poll_interval: float = 3.0
    conversation_message_limit: int = 16

    # ===== CREDITS =====
    purchase_redirect_delay: float = 2.0

    # ===== VIEWS =====
    page_size: int = 20

    # ===== SYSTEM =====
    log_level: str = "INFO"
    port: int = 8002


settings = Settings()
