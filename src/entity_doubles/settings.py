# entity_doubles/settings.py
"""
Environment-driven settings.

``ENTITY_DOUBLES_ADAPTER`` selects the adapter used by
``EntityDoubleFactory.from_settings()``; ``ENTITY_DOUBLES_ID_START`` sets the
first identifier handed out by a fresh ``IdSequence``.
"""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DoubleSettings(BaseSettings):
    """Settings with sensible defaults; environment variables override them."""

    model_config = SettingsConfigDict(env_prefix="ENTITY_DOUBLES_", extra="ignore")

    adapter: Literal["dispatch", "mock"] = "dispatch"
    id_start: int = Field(default=1, ge=0, description="First id handed out by IdSequence")


def get_settings() -> DoubleSettings:
    return DoubleSettings()
