# ABOUTME: Unit tests for loading homelib configuration.
# ABOUTME: Covers defaults, relative path resolution, overrides, and malformed files.

from pathlib import Path

import pytest

from homelib.config import ConfigError, LibraryConfig, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "config.json") == LibraryConfig()

    def test_absolute_paths(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            f'{{"database": "{tmp_path / "lib.db"}", "covers_directory": "{tmp_path / "img"}"}}'
        )
        config = load_config(path)
        assert config.db_path == tmp_path / "lib.db"
        assert config.covers_dir == tmp_path / "img"

    def test_relative_paths_resolve_against_config_dir(self, tmp_path: Path) -> None:
        path = tmp_path / "conf" / "config.json"
        path.parent.mkdir()
        path.write_text('{"database": "data/library.db"}')

        config = load_config(path)

        assert config.db_path == tmp_path / "conf" / "data" / "library.db"
        assert config.covers_dir == LibraryConfig().covers_dir

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"theme": "dark"}')
        assert load_config(path) == LibraryConfig()

    @pytest.mark.parametrize(
        "content",
        ["{not json", "[1, 2]", '{"database": 5}', '{"covers_directory": "  "}'],
    )
    def test_malformed_config_raises(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "config.json"
        path.write_text(content)
        with pytest.raises(ConfigError):
            load_config(path)


class TestOverrides:
    def test_overrides_replace_values(self, tmp_path: Path) -> None:
        config = LibraryConfig().with_overrides(db_path=tmp_path / "x.db")
        assert config.db_path == tmp_path / "x.db"
        assert config.covers_dir == LibraryConfig().covers_dir

    def test_none_keeps_values(self) -> None:
        base = LibraryConfig(db_path=Path("/a.db"), covers_dir=Path("/c"))
        assert base.with_overrides() == base
