"""Configuration management for the workflow engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Workflow settings loaded from environment."""

    allow_hr_bypass: bool = False
    money_places: int = 2
    hours_per_week: int = 40

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.money_places < 0 or self.money_places > 6:
            raise ValueError("money_places must be between 0 and 6")
        if self.hours_per_week < 1:
            raise ValueError("hours_per_week must be at least 1")

    @property
    def money_quantum(self) -> Decimal:
        """Smallest currency unit used for rounding and integrity checks."""
        return Decimal(1).scaleb(-self.money_places)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            allow_hr_bypass=_env_bool("WORKFLOW_ALLOW_HR_BYPASS"),
            money_places=int(os.getenv("WORKFLOW_MONEY_PLACES", "2")),
            hours_per_week=int(os.getenv("WORKFLOW_HOURS_PER_WEEK", "40")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
