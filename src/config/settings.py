# src/config/settings.py — v2
"""Typed configuration loaded from the environment / .env via pydantic-settings.

Single source of truth for deployment-specific settings. Every field can be
overridden with an ``ASSETPIPE_``-prefixed environment variable.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import ByteSize, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


_PREFIX_RE = re.compile(r"^[A-Za-z0-9_.]+$")


class Settings(BaseSettings):
    """Application settings loaded from the environment and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ASSETPIPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Project ===
    assetfile: Path = Path("Assetfile")

    # === Temp directories ===
    tmpdir_prefix: str = "assetpipe"
    digest_additions: str = ""

    # === Manifest ===
    manifest_backend: Literal["json", "sqlite"] = "json"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: ByteSize = ByteSize(10 * 1024 * 1024)
    log_retention: int = 5

    # --- Validators ---

    @field_validator("tmpdir_prefix")
    @classmethod
    def validate_tmpdir_prefix(cls, v: str) -> str:  # noqa: N805
        """Prefix must be a single safe path component without hyphens."""
        if not v or not _PREFIX_RE.match(v):
            raise ValueError(
                "tmpdir_prefix must be non-empty and contain only "
                "letters, digits, '_' or '.'"
            )
        return v

    @field_validator("log_retention")
    @classmethod
    def validate_log_retention(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("log_retention must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        tokens = self.digest_additions_list
        if any("/" in token or "\\" in token for token in tokens):
            errors.append("DIGEST_ADDITIONS tokens must not contain path separators")

        if self.log_file is not None and self.log_retention == 0:
            errors.append("LOG_FILE requires LOG_RETENTION >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def digest_additions_list(self) -> list[str]:
        """Parse comma-separated digest additions."""
        return [t.strip() for t in self.digest_additions.split(",") if t.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment with optional overrides.

    Args:
        **overrides: Key-value pairs to override env values.

    Returns:
        Validated Settings instance.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
