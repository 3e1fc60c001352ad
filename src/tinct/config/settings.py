"""Unified settings — caller options, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — options passed by the embedding application
  2. Env vars     — ``TINCT_*`` prefix (``TINCT_COMPILER__MAX_ITERATIONS=20``)
  3. TOML file    — ``tinct.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tinct.config.discovery import find_config
from tinct.config.models import BatchConfig, CompilerConfig, LoaderConfig, SectionsConfig
from tinct.domain.errors import TinctError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``tinct.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise TinctError(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class TinctSettings(BaseSettings):
    """Unified settings for tinct compilations.

    Attributes:
        root: Directory imports and relative theme paths resolve against
            (parent of ``tinct.toml``, or CWD if no config found).
        config_path: The config file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TINCT_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    verbose: bool = False
    log_json: bool = False

    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    sections: SectionsConfig = Field(default_factory=SectionsConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_options(
        cls,
        *,
        config_path: str | Path | None = None,
        root: Path | None = None,
        **options: Any,
    ) -> TinctSettings:
        """Construct settings for one invocation.

        Discovers ``tinct.toml`` via walk-up from *root* (or uses the
        explicit *config_path*), resolves *root* from the config file's
        parent directory, and merges *options* as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **options)
        finally:
            _tls.toml_path = None
