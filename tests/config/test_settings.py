"""Tests for WonderformSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from wonderform.config.settings import WonderformSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("WONDERFORM_CONFIG", "WONDERFORM_QUIET", "WONDERFORM_FORM__RESET_ON_SUBMIT"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = WonderformSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.form.reset_on_submit is False
        assert settings.plugins.enabled is True
        assert settings.plugin_dir == tmp_path / ".wonderform" / "plugins"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = WonderformSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "wonderform.toml").write_text(
            "[form]\nreset_on_submit = true\n[plugins]\nenabled = false\n"
        )
        settings = WonderformSettings.from_cli(project_root=tmp_path)
        assert settings.form.reset_on_submit is True
        assert settings.form.validate_on_change is True  # default preserved
        assert settings.plugins.enabled is False
        assert settings.config_path == tmp_path / "wonderform.toml"

    def test_project_root_from_config_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "wonderform.toml").write_text("")
        child = tmp_path / "forms"
        child.mkdir()
        monkeypatch.chdir(child)
        settings = WonderformSettings.from_cli()
        assert settings.project_root == tmp_path.resolve()

    def test_project_dir_config_roots_at_its_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / ".wonderform" / "config.toml"
        config_file.parent.mkdir()
        config_file.write_text("[form]\nreset_on_submit = true\n")
        monkeypatch.chdir(tmp_path)
        settings = WonderformSettings.from_cli()
        assert settings.form.reset_on_submit is True
        assert settings.project_root == tmp_path.resolve()
        assert settings.plugin_dir == tmp_path.resolve() / ".wonderform" / "plugins"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[plugins]\nlocal_dir = "ext"\n')
        settings = WonderformSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.plugins.local_dir == "ext"
        assert settings.config_path == custom
        assert settings.plugin_dir == tmp_path / "ext"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "wonderform.toml").write_text("[form\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            WonderformSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "wonderform.toml").write_text("[form]\nreset_on_submit = true\n")
        monkeypatch.setenv("WONDERFORM_FORM__RESET_ON_SUBMIT", "false")
        settings = WonderformSettings.from_cli(project_root=tmp_path)
        assert settings.form.reset_on_submit is False

    def test_cli_flags_override_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WONDERFORM_QUIET", "false")
        settings = WonderformSettings.from_cli(project_root=tmp_path, quiet=True, json_output=True)
        assert settings.quiet is True
        assert settings.json_output is True
