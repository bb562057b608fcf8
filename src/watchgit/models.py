"""Registration model returned by the convenience listings."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Registration(BaseModel):
    """One alias-to-path mapping stored in the registry."""

    alias: str = Field(min_length=1)
    path: str = Field(min_length=1, description="Absolute, symlink-resolved repository path")

    model_config = {"frozen": True}
