"""Runtime configuration: env-driven registry settings.

Centralized config using pydantic-settings. Reads from a .env file and
SCILEDGER_* environment variables. A fresh registry store is seeded from
these values; once a store holds a config, the stored values win.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sciledger.models.registry import (
    DEFAULT_MAX_CONTRIBUTIONS,
    DEFAULT_REWARD_RATE,
    DEFAULT_SUBMISSION_FEE,
    DEFAULT_VALIDATION_THRESHOLD,
)

# Reserved burn address; never accepted as the authority.
NULL_PRINCIPAL = "SP000000000000000000002Q6VF78"


class RegistrySettings(BaseSettings):
    """Registry settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SCILEDGER_LOG_LEVEL=DEBUG
        export SCILEDGER_DB_PATH=/data/registry.db
        export SCILEDGER_REQUIRE_AUTHORITY_CALLER_FOR_PARAMS=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SCILEDGER_",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"

    # Storage
    db_path: Path = Path(".sciledger/registry.db")

    # Initial registry parameters
    max_contributions: int = Field(DEFAULT_MAX_CONTRIBUTIONS, ge=0)
    submission_fee: int = Field(DEFAULT_SUBMISSION_FEE, ge=0)
    reward_rate: int = DEFAULT_REWARD_RATE
    validation_threshold: int = DEFAULT_VALIDATION_THRESHOLD

    # Access policy
    null_principal: str = NULL_PRINCIPAL
    # Parameter setters only check that an authority exists unless this is set.
    require_authority_caller_for_params: bool = False


# Module-level singleton: import as `from sciledger.config import settings`
settings = RegistrySettings()
