"""
Tests for gateway configuration persistence.

Run: python3 -m pytest tests/test_config.py -v
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from rest.config import ENV_HOST, ENV_LOG_LEVEL, ENV_PORT, RestConfig
from utils.paths import ThreadRestPaths, get_real_user_home


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (ENV_HOST, ENV_PORT, ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)


class TestRestConfig:
    """Tests for RestConfig dataclass."""

    def test_defaults(self):
        """Test default values."""
        config = RestConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8081
        assert config.collect_timeout == 2.0
        assert config.diag_reset_timeout == 3.0
        assert config.simulate is False
        assert config.log_file == ""

    def test_from_dict_ignores_unknown(self):
        config = RestConfig.from_dict({"port": 9000, "colour": "blue"})
        assert config.port == 9000
        assert not hasattr(config, "colour")

    def test_to_dict_round_trip(self):
        config = RestConfig(host="0.0.0.0", collect_timeout=1.5)
        assert RestConfig.from_dict(config.to_dict()) == config


class TestValidate:
    """Tests for RestConfig.validate()"""

    def test_defaults_valid(self):
        RestConfig().validate()

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_bad_port(self, port):
        with pytest.raises(ValueError, match="port"):
            RestConfig(port=port).validate()

    def test_non_positive_timeout(self):
        with pytest.raises(ValueError, match="collect_timeout"):
            RestConfig(collect_timeout=0).validate()

    def test_request_timeout_must_exceed_window(self):
        with pytest.raises(ValueError, match="request_timeout"):
            RestConfig(collect_timeout=5.0, request_timeout=5.0).validate()


class TestPersistence:
    """Tests for load/save"""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = RestConfig.load(tmp_path / "missing.json")
        assert config == RestConfig()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "sub" / "rest.json"
        assert RestConfig(port=9100, log_level="DEBUG").save(path) is True

        assert json.loads(path.read_text())["port"] == 9100
        loaded = RestConfig.load(path)
        assert loaded.port == 9100
        assert loaded.log_level == "DEBUG"

    def test_corrupt_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "rest.json"
        path.write_text("{not json")

        config = RestConfig.load(path)

        assert config == RestConfig()
        assert "Failed to load REST config" in caplog.text

    def test_invalid_values_give_defaults(self, tmp_path):
        path = tmp_path / "rest.json"
        path.write_text(json.dumps({"port": 70000}))

        assert RestConfig.load(path).port == 8081

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        assert RestConfig().save(blocker / "rest.json") is False


class TestEnvironment:
    """Tests for THREADREST_* overrides"""

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "rest.json"
        RestConfig(port=9100).save(path)
        monkeypatch.setenv(ENV_PORT, "9200")
        monkeypatch.setenv(ENV_HOST, "0.0.0.0")
        monkeypatch.setenv(ENV_LOG_LEVEL, "debug")

        config = RestConfig.load(path)

        assert config.port == 9200
        assert config.host == "0.0.0.0"
        assert config.log_level == "DEBUG"

    def test_invalid_port_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv(ENV_PORT, "eighty")
        config = RestConfig()

        config.apply_env()

        assert config.port == 8081
        assert "Ignoring invalid" in caplog.text


class TestPaths:
    """Tests for per-user path resolution"""

    def test_sudo_user_home(self, monkeypatch):
        monkeypatch.setenv('SUDO_USER', 'alice')
        assert get_real_user_home() == Path('/home/alice')

    def test_root_sudo_user_ignored(self, monkeypatch):
        monkeypatch.setenv('SUDO_USER', 'root')
        assert get_real_user_home() == Path.home()

    def test_config_file_location(self, monkeypatch):
        monkeypatch.delenv('SUDO_USER', raising=False)
        assert ThreadRestPaths.get_config_file() == Path.home() / '.config' / 'threadrest' / 'rest.json'

    def test_default_config_path_used(self, monkeypatch, tmp_path):
        monkeypatch.setattr(ThreadRestPaths, 'get_config_dir', classmethod(lambda cls: tmp_path))

        assert RestConfig.save(RestConfig(port=9300)) is True
        assert RestConfig.load().port == 9300
