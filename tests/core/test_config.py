"""Tests for TOML configuration loading."""

from pathlib import Path

import pytest

from saafy.core.config import Config, create_default_config, load_config


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("SAAFY_API_URL", raising=False)
    monkeypatch.delenv("SAAFY_LOG_LEVEL", raising=False)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_is_created_with_defaults(self, tmp_path: Path) -> None:
        """A missing config file is written out and defaults are returned."""
        path = tmp_path / "config.toml"

        config = load_config(path)

        assert path.exists()
        assert config == Config()

    def test_default_template_parses_to_defaults(self, tmp_path: Path) -> None:
        """The generated template round-trips to the dataclass defaults."""
        path = tmp_path / "config.toml"
        path.write_text(create_default_config(), encoding="utf-8")

        config = load_config(path)

        assert config.api == Config().api
        assert config.harvest == Config().harvest
        assert config.web.cors_origins == Config().web.cors_origins

    def test_sections_are_overlaid(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            '[api]\nbase_url = "https://songs.example.com/"\n'
            "[discovery]\nfor_you_limit = 6\n"
            '[logging]\nlevel = "debug"\n',
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.api.base_url == "https://songs.example.com"
        assert config.discovery.for_you_limit == 6
        assert config.logging.level == "DEBUG"
        assert config.player.volume == 0.7

    def test_invalid_section_falls_back_to_defaults(self, tmp_path: Path) -> None:
        """A section that fails validation is replaced by its defaults."""
        path = tmp_path / "config.toml"
        path.write_text('[player]\naudio_backend = "vlc"\nvolume = 0.2\n', encoding="utf-8")

        config = load_config(path)

        assert config.player.audio_backend == "mpv"
        assert config.player.volume == 0.7

    def test_unknown_keys_are_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[history]\nmax_entries = 4\nflavour = 1\n", encoding="utf-8")

        config = load_config(path)

        assert config.history.max_entries == 4
        assert not hasattr(config.history, "flavour")

    def test_broken_toml_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[api\nbase_url = ", encoding="utf-8")

        assert load_config(path) == Config()

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """SAAFY_API_URL and SAAFY_LOG_LEVEL win over config.toml."""
        path = tmp_path / "config.toml"
        path.write_text('[api]\nbase_url = "https://a.example.com"\n', encoding="utf-8")
        monkeypatch.setenv("SAAFY_API_URL", "https://b.example.com/")
        monkeypatch.setenv("SAAFY_LOG_LEVEL", "warning")

        config = load_config(path)

        assert config.api.base_url == "https://b.example.com"
        assert config.logging.level == "WARNING"

    def test_log_file_is_expanded(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[logging]\nlog_file = "~/saafy.log"\n', encoding="utf-8")

        config = load_config(path)

        assert config.logging.log_file == str(Path("~/saafy.log").expanduser())


class TestValidation:
    """Tests for per-section validate()."""

    def test_api_rejects_non_http_url(self) -> None:
        config = Config()
        config.api.base_url = "ftp://songs"
        with pytest.raises(ValueError, match="http"):
            config.api.validate()

    def test_player_rejects_out_of_range_volume(self) -> None:
        config = Config()
        config.player.volume = 1.5
        with pytest.raises(ValueError, match="volume"):
            config.player.validate()
