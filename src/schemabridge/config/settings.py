"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Tables created by the framework itself; never used for relationship inference
DEFAULT_SKIP_TABLES = [
    "migrations",
    "password_resets",
    "password_reset_tokens",
    "personal_access_tokens",
    "failed_jobs",
    "jobs",
    "cache",
    "sessions",
    "job_batches",
]

SYSTEM_COLUMNS = ("id", "created_at", "updated_at", "deleted_at")


def find_and_load_env_file():
    """Find and load .env file in current directory or parent directories."""
    search_paths = [
        Path.cwd(),
        Path(__file__).parent.parent.parent.parent,  # Project root
    ]

    for start_path in search_paths:
        current = start_path.resolve()
        # Check current directory and up to 3 levels up
        for _ in range(4):
            env_path = current / ".env"
            if env_path.exists():
                load_dotenv(env_path, override=False)
                return str(env_path)
            parent = current.parent
            if parent == current:  # Reached root
                break
            current = parent
    return None


# Load .env file before Settings class is defined
find_and_load_env_file()


class TranslationConfig(BaseModel):
    """Explicit configuration handed to the parsers, inferencer and emitters."""

    soft_deletes: bool = False
    on_delete: str = "cascade"
    skip_tables: List[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_TABLES))
    system_columns: Tuple[str, ...] = SYSTEM_COLUMNS
    indent: str = " " * 12  # column lines sit inside Schema::create(...) { }


class Settings(BaseSettings):
    """Application configuration settings."""

    # Project layout
    migrations_dir: Path = Path("database/migrations")
    diagrams_dir: Path = Path("storage/app/db/diagrams")

    # Scaffolding defaults
    soft_deletes: bool = False
    on_delete: str = "cascade"
    skip_tables: List[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_TABLES))

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=None,  # We load it manually with dotenv
        env_file_encoding="utf-8",
        env_prefix="SCHEMABRIDGE_",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """Initialize settings and create the log directory if needed."""
        find_and_load_env_file()
        super().__init__(**kwargs)
        if self.log_file:
            self.log_file = Path(self.log_file)
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def translation_config(self) -> TranslationConfig:
        """Build the value object the translation core works from."""
        return TranslationConfig(
            soft_deletes=self.soft_deletes,
            on_delete=self.on_delete,
            skip_tables=list(self.skip_tables),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
