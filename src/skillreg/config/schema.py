"""
Pydantic configuration schema for skillreg.

This module defines all configuration models with validation.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from skillreg.skills.registry import DEFAULT_MAX_SKILL_BYTES

# =============================================================================
# Storage Configuration
# =============================================================================


class StorageConfig(BaseModel):
    """Storage backend configuration."""

    model_config = ConfigDict(extra="allow")

    backend: Literal["memory", "filesystem"] = Field(
        default="filesystem",
        description="Where skills are stored",
    )
    path: str | None = Field(
        default=None,
        description="Root directory for the filesystem backend; defaults to $SKILLREG_HOME/data",
    )


# =============================================================================
# Limits Configuration
# =============================================================================


class LimitsConfig(BaseModel):
    """Publishing limits."""

    model_config = ConfigDict(extra="allow")

    max_skill_bytes: int = Field(
        default=DEFAULT_MAX_SKILL_BYTES,
        ge=1,
        description="Maximum UTF-8 size of a published skill",
    )


# =============================================================================
# Root Configuration Model
# =============================================================================


class Config(BaseModel):
    """
    Root configuration model for skillreg.

    Configuration can be loaded from YAML files and environment variables,
    merged in order of priority.
    """

    model_config = ConfigDict(extra="allow")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
