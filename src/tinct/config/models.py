"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``tinct.toml`` only contains
overrides. An empty file (or none at all) compiles standard themes.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class CompilerConfig(BaseModel):
    """[compiler] section."""

    model_config = {"frozen": True}

    max_iterations: int = Field(default=10, ge=1)
    carry_forward: str = "^"

    @field_validator("carry_forward")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            msg = "carry_forward placeholder must not be empty"
            raise ValueError(msg)
        return value


class SectionsConfig(BaseModel):
    """[sections] section — top-level keys of a theme document."""

    model_config = {"frozen": True}

    config: str = "config"
    palette: str = "palette"
    vars: str = "vars"
    theme: str = "theme"
    flat_sections: list[str] = Field(default_factory=lambda: ["colors"])


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    extensions: list[str] = Field(
        default_factory=lambda: [".yaml", ".yml", ".json", ".json5"]
    )


class BatchConfig(BaseModel):
    """[batch] section."""

    model_config = {"frozen": True}

    max_workers: int = Field(default=4, ge=1)
