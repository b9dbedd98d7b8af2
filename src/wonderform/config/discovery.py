"""Locate the project's wonderform configuration.

A project is configured either by ``wonderform.toml`` at its root or by
``.wonderform/config.toml`` next to the local plugin directory.  The first
directory, walking up from the start point, that holds either file is the
project root.  ``WONDERFORM_CONFIG`` overrides the walk; it may name the
file itself or a project directory.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "wonderform.toml"
PROJECT_DIRNAME = ".wonderform"
CONFIG_ENV_VAR = "WONDERFORM_CONFIG"

# Checked in this order within each directory.
CONFIG_CANDIDATES = (Path(CONFIG_FILENAME), Path(PROJECT_DIRNAME) / "config.toml")


def _config_in(directory: Path) -> Path | None:
    for candidate in CONFIG_CANDIDATES:
        path = directory / candidate
        if path.is_file():
            return path
    return None


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None.

    When ``WONDERFORM_CONFIG`` is set it wins outright, even if it names
    nothing usable.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        override = Path(env_path)
        if override.is_dir():
            return _config_in(override)
        return override if override.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        found = _config_in(directory)
        if found is not None:
            return found
    return None


def project_root_for(config_path: Path) -> Path:
    """Directory a config file belongs to; ``.wonderform/`` counts as its parent's."""
    parent = config_path.parent
    if parent.name == PROJECT_DIRNAME:
        return parent.parent
    return parent
