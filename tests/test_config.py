"""Tests for configuration loading."""

from pathlib import Path
from unittest.mock import patch

import pytest
from blockstage.config import Config, LiveReloadConfig, ServerConfig, SiteConfig


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "blockstage.toml"
        config_file.write_text("""
[server]
host = "0.0.0.0"
port = 3000

[site]
content_file = "content/site.json"
components_file = "components.json"
public_dir = "static"
base_url = "https://cms.example.com"

[fetch]
timeout = 2.5

[live_reload]
enabled = false
watch_patterns = ["*.json"]
""")

        config = Config.load(config_file)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 3000
        assert config.site.content_file == tmp_path / "content/site.json"
        assert config.site.components_file == tmp_path / "components.json"
        assert config.site.public_dir == tmp_path / "static"
        assert config.site.base_url == "https://cms.example.com"
        assert config.fetch.timeout == 2.5
        assert config.live_reload.enabled is False
        assert config.live_reload.watch_patterns == ["*.json"]
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load minimal config with defaults relative to config file."""
        config_file = tmp_path / "blockstage.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.site.content_file == tmp_path / "site.json"
        assert config.site.components_file is None
        assert config.site.public_dir == tmp_path / "public"
        assert config.fetch.timeout == 10.0
        assert config.live_reload.enabled is True
        assert config.live_reload.watch_patterns is None

    def test__missing_explicit_path__raises_error(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError for missing explicit config file."""
        config_file = tmp_path / "nonexistent.toml"

        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(config_file)

    def test__no_path_no_discovery__returns_defaults(self) -> None:
        """Return defaults when no config file found."""
        with patch.object(Config, "_discover_config", return_value=None):
            config = Config.load()

        assert config.server.port == 8080
        assert config.site.content_file == Path("site.json")
        assert config.site.public_dir == Path("public")
        assert config.config_path is None


class TestConfigDiscovery:
    """Tests for config file discovery."""

    def test__config_in_current_dir__found(self, tmp_path: Path) -> None:
        """Find config in current directory."""
        config_file = tmp_path / "blockstage.toml"
        config_file.write_text("[server]\nport = 9000")

        with patch("pathlib.Path.cwd", return_value=tmp_path):
            discovered = Config._discover_config()

        assert discovered == config_file

    def test__config_in_parent_dir__found(self, tmp_path: Path) -> None:
        """Find config in parent directory."""
        config_file = tmp_path / "blockstage.toml"
        config_file.write_text("[server]\nport = 9000")
        subdir = tmp_path / "sub" / "dir"
        subdir.mkdir(parents=True)

        with patch("pathlib.Path.cwd", return_value=subdir):
            discovered = Config._discover_config()

        assert discovered == config_file


class TestConfigValidation:
    """Tests for configuration validation errors."""

    @pytest.mark.parametrize(
        ("toml", "message"),
        [
            ('server = "x"', "server section must be a dictionary"),
            ('[server]\nport = "80"', "server.port must be an integer"),
            ("[server]\nport = true", "server.port must be an integer"),
            ("[site]\ncontent_file = 1", "site.content_file must be a string"),
            ("[site]\nbase_url = 1", "site.base_url must be a string"),
            ("[fetch]\ntimeout = 0", "fetch.timeout must be a positive number"),
            ('[live_reload]\nenabled = "yes"', "live_reload.enabled must be a boolean"),
            ("[live_reload]\nwatch_patterns = [1]", "live_reload.watch_patterns items must be strings"),
        ],
    )
    def test__invalid_value__raises_error(self, tmp_path: Path, toml: str, message: str) -> None:
        """Reject values of the wrong type."""
        config_file = tmp_path / "blockstage.toml"
        config_file.write_text(toml)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestConfigOverrides:
    """Tests for Config.with_overrides()."""

    def _config(self) -> Config:
        return Config(
            server=ServerConfig(),
            site=SiteConfig(),
            fetch=Config._default().fetch,
            live_reload=LiveReloadConfig(),
        )

    def test__overrides__applied(self) -> None:
        """Apply non-None overrides."""
        config = self._config()

        result = config.with_overrides(
            host="0.0.0.0",
            port=9000,
            content_file=Path("other.json"),
            components_file=Path("components.json"),
            live_reload_enabled=False,
        )

        assert result.server.host == "0.0.0.0"
        assert result.server.port == 9000
        assert result.site.content_file == Path("other.json")
        assert result.site.components_file == Path("components.json")
        assert result.live_reload.enabled is False

    def test__no_overrides__unchanged(self) -> None:
        """Keep values when overrides are None."""
        config = self._config()

        result = config.with_overrides()

        assert result == config

    def test__original__not_modified(self) -> None:
        """Leave the original config untouched."""
        config = self._config()

        config.with_overrides(port=9000)

        assert config.server.port == 8080
