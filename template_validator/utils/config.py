# template_validator/utils/config.py
from __future__ import annotations

import functools
import json
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when the run itself is misconfigured (settings file, folders)."""


# ---------- Enums ----------

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Process-level configuration for the template validator.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in project root
      3) Defaults below
    """

    # ---- Inputs ----
    SETTINGS_FILE: Path = Field(default=Path("./settings.json"), description="Folder/category settings JSON")
    ICONS_DIR: Path = Field(default=Path("./icons"), description="Directory with custom <icon>.svg assets")
    PROPERTIES_SUBDIR: str = Field(default="properties", min_length=1)
    EXEMPT_FILE_SUFFIX: str = Field(default="blank.yml", description="Definition skipped by the category rule")

    # ---- Execution ----
    PARALLEL_EXECUTION: bool = Field(default=False)
    MAX_WORKERS: int = Field(default=4, ge=1)

    # ---- Reporting ----
    # Set to "true" by the GitHub Actions runner
    GITHUB_ACTIONS: bool = Field(default=False)

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./template-validator.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("SETTINGS_FILE", "ICONS_DIR", "LOG_FILE", mode="after")
    @classmethod
    def _absolutize(cls, v: Path) -> Path:
        return v if v.is_absolute() else Path.cwd() / v


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()


# ---------- Checker configuration (settings.json) ----------


class DirectoryCategory(BaseModel):
    name: str = Field(..., min_length=1, description="Workflow folder, as listed in `folders`")
    category: str = Field(..., min_length=1)

    @property
    def directory(self) -> Path:
        return Path(self.name)


class CheckerConfig(BaseModel):
    """Folders to scan plus the category rules applied to them. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    folders: list[str] = Field(default_factory=list)
    allowed_categories: list[str] = Field(default_factory=list)
    directory_category_map: list[DirectoryCategory] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_directories(self) -> "CheckerConfig":
        seen: set[Path] = set()
        for entry in self.directory_category_map:
            if entry.directory in seen:
                raise ValueError(f"directory_category_map lists {entry.name!r} more than once")
            seen.add(entry.directory)
        return self

    def unmapped_folders(self) -> list[str]:
        mapped = {e.directory for e in self.directory_category_map}
        return [f for f in self.folders if Path(f) not in mapped]

    def unknown_categories(self) -> list[str]:
        allowed = {c.casefold() for c in self.allowed_categories}
        return [e.category for e in self.directory_category_map if e.category.casefold() not in allowed]


def load_checker_config(path: Path | str) -> CheckerConfig:
    """Read and validate the folder/category settings file."""
    cfg_path = Path(path)
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read settings file {cfg_path}: {e}") from e
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ConfigurationError(f"Settings file {cfg_path} is not valid JSON: {e}") from e
    try:
        return CheckerConfig.model_validate(data)
    except ValidationError as ve:
        lines = [f"Invalid settings file '{cfg_path}':"]
        for e in ve.errors():
            loc = ".".join(str(p) for p in e.get("loc", []))
            lines.append(f"  - {loc or '<root>'}: {e.get('msg', 'invalid value')}")
        raise ConfigurationError("\n".join(lines)) from ve


def settings_file_or_default(path: Optional[Path | str]) -> Path:
    return Path(path) if path else get_settings().SETTINGS_FILE
