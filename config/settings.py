"""Application settings with secure API key handling"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class Settings:
    """Application configuration settings - API keys are NEVER persisted"""

    # OpenAI Settings - SECURITY: Never persist API key
    openai_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    openai_temperature: float = field(default_factory=lambda: float(os.getenv("OPENAI_TEMPERATURE", "0.7")))
    openai_max_tokens: int = field(default_factory=lambda: int(os.getenv("OPENAI_MAX_TOKENS", "2048")))

    # Application Settings
    app_title: str = field(default_factory=lambda: os.getenv("APP_TITLE", "Data Chat"))
    app_icon: str = field(default_factory=lambda: os.getenv("APP_ICON", "📊"))
    app_layout: str = field(default_factory=lambda: os.getenv("APP_LAYOUT", "wide"))

    # File Settings
    max_file_size_mb: int = field(default_factory=lambda: int(os.getenv("MAX_FILE_SIZE_MB", "10")))
    allowed_file_types: list = field(default_factory=lambda: os.getenv(
        "ALLOWED_FILE_TYPES",
        "csv,tsv,json,xlsx"
    ).split(','))
    preview_rows: int = field(default_factory=lambda: int(os.getenv("PREVIEW_ROWS", "10")))

    # Logging Settings
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_dir: Path = field(default_factory=lambda: Path(os.getenv("LOG_DIR", "logs")))
    log_max_bytes: int = field(default_factory=lambda: int(os.getenv("LOG_MAX_BYTES", "10485760")))
    log_backup_count: int = field(default_factory=lambda: int(os.getenv("LOG_BACKUP_COUNT", "5")))

    # UI Settings
    sidebar_state: str = field(default_factory=lambda: os.getenv("SIDEBAR_STATE", "expanded"))
    show_debug: bool = field(default_factory=lambda: os.getenv("SHOW_DEBUG", "false").lower() == "true")
    chart_height: int = field(default_factory=lambda: int(os.getenv("CHART_HEIGHT", "350")))

    # Session Settings
    context_window: int = field(default_factory=lambda: int(os.getenv("CONTEXT_WINDOW", "6")))
    max_context_chars: int = field(default_factory=lambda: int(os.getenv("MAX_CONTEXT_CHARS", "200000")))
    turn_timeout: float = field(default_factory=lambda: float(os.getenv("TURN_TIMEOUT", "120")))

    # Prompt Settings
    prompt_dir: Path = field(default_factory=lambda: Path(os.getenv("PROMPT_DIR", "config/prompts")))
    use_custom_prompt: bool = field(default_factory=lambda: os.getenv("USE_CUSTOM_PROMPT", "false").lower() == "true")

    def __post_init__(self):
        """Initialize directories after dataclass creation"""
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def max_file_size_bytes(self) -> int:
        """Upload cap checked before any parse attempt"""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get API key - ONLY from environment, never from storage"""
        return os.getenv("OPENAI_API_KEY")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance"""
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings

