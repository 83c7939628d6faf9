"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NOTEDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Note roots - stored as comma-separated string in .env
    directories: str = "~/notes"

    # Extensions
    extension: str = "org"
    secondary_extensions: str = "txt,md"

    # Filtering
    filter_regexp: bool = True
    filter_ignore_case: bool = False

    # Search index
    use_search_index: bool = False
    search_index_path: Path = Path("~/.cache/notedeck/index.sqlite3")
    max_results: int = 0

    # Persisted metadata cache (disabled when unset)
    cache_file: Path | None = None

    # New notes and archiving
    archive_directory: str = "_archive"
    new_file_format: str = "%Y-%m-%dT%H%M"

    log_level: str = "INFO"

    @property
    def directory_specs(self) -> list[str]:
        """Parse configured note roots as a list of path specs."""
        return [d.strip() for d in self.directories.split(",") if d.strip()]

    @property
    def extensions(self) -> list[str]:
        """Primary extension followed by the secondary ones, without duplicates."""
        secondary = [_normalize_extension(e) for e in self.secondary_extensions.split(",")]
        result = [self.extension]
        for ext in secondary:
            if ext and ext not in result:
                result.append(ext)
        return result

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Ensure the primary extension is usable as a file suffix."""
        ext = _normalize_extension(v)
        if not ext:
            raise ValueError("Primary extension must not be empty")
        if "/" in ext:
            raise ValueError(f"Invalid extension: {v}")
        return ext

    @field_validator("max_results")
    @classmethod
    def validate_max_results(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_results must be 0 (unlimited) or positive")
        return v

    @field_validator("search_index_path", "cache_file")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None


def _normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings()
