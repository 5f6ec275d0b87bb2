"""Tests for filesystem path helpers."""

from pathlib import Path

from dom314.state.store import StateStore
from dom314.utils.paths import (
    get_config_dir,
    get_config_file,
    get_data_dir,
    get_database_file,
)


class TestPaths:
    """Tests for config and data locations."""

    def test_env_overrides(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("DOM314_CONFIG_DIR", str(tmp_path / "cfg"))
        monkeypatch.setenv("DOM314_DATA_DIR", str(tmp_path / "data"))

        assert get_config_dir() == tmp_path / "cfg"
        assert get_config_file() == tmp_path / "cfg" / "config.yaml"
        assert get_data_dir() == tmp_path / "data"

    def test_database_file_has_no_side_effects(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("DOM314_DATA_DIR", str(tmp_path / "data"))

        db_file = get_database_file()

        assert db_file == tmp_path / "data" / "database.sqlite3"
        assert not (tmp_path / "data").exists()

    def test_store_creates_data_directory(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("DOM314_DATA_DIR", str(tmp_path / "data"))

        store = StateStore()

        assert store.db_path == tmp_path / "data" / "database.sqlite3"
        assert store.db_path.is_file()

    def test_platform_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("DOM314_CONFIG_DIR", raising=False)
        monkeypatch.delenv("DOM314_DATA_DIR", raising=False)

        assert "dom314" in str(get_config_dir())
        assert "dom314" in str(get_data_dir())
