"""Config file discovery.

Walk-up finder locates ``tinct.toml``, similar to how git finds ``.git/``.
The ``TINCT_CONFIG`` environment variable overrides discovery.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "tinct.toml"
CONFIG_ENV_VAR = "TINCT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``tinct.toml``.

    Returns the path to the config file, or None if not found.
    Checks ``TINCT_CONFIG`` first; if it names a missing file, returns None.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent
