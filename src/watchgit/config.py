"""Registry configuration via environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DB_LOCATION = "~/.watchgit.db"


class RegistrySettings(BaseSettings):
    """Settings threaded into :meth:`watchgit.registry.Registry.open`.

    ``db_location`` may use shell syntax (``~``, ``$HOME``); it is expanded
    when the registry is opened, not here.
    """

    db_location: str = Field(
        default=DEFAULT_DB_LOCATION,
        description="Registry file location, shell-style expansion allowed",
    )

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    model_config = {
        "env_prefix": "WATCHGIT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
