"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, wonderform.toml only contains overrides.
"""

from __future__ import annotations

from pydantic import BaseModel

from wonderform.engine.form import FormOptions


class FormDefaultsConfig(BaseModel):
    """[form] section — defaults for every form the CLI builds."""

    model_config = {"frozen": True}

    validate_on_change: bool = True
    validate_on_blur: bool = True
    reset_on_submit: bool = False

    def to_options(self, **overrides: bool) -> FormOptions:
        """FormOptions from these defaults, with per-schema *overrides* applied."""
        return FormOptions(**{**self.model_dump(), **overrides})


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".wonderform/plugins"
