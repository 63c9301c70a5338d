#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Application configuration.

All values can be overridden via environment variables or a .env file.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


# -----------------------------------------------------------------------------

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────────────

    app_name: str = "MacroTpl"
    app_version: str = "0.3.0"
    debug: bool = False
    environment: Literal["development", "testing", "production"] = "development"

    # ── Templates ──────────────────────────────────────────────────────────

    template_dir: Path = Path("./templates")
    autoescape: bool = True
    cache_templates: bool = True   # set False to recompile on every from_file()
    max_macro_depth: int = 50      # nested macro calls per render

    # ── CORS ───────────────────────────────────────────────────────────────

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def template_dir_resolved(self) -> Path:
        return self.template_dir.expanduser().resolve()


# -----------------------------------------------------------------------------

@lru_cache
def get_settings() -> Settings:
    return Settings()


# -----------------------------------------------------------------------------
