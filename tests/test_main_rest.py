"""
Tests for the command line entry point.

Run: python3 -m pytest tests/test_main_rest.py -v
"""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

import main_rest
from rest.config import ENV_HOST, ENV_LOG_LEVEL, ENV_PORT, RestConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (ENV_HOST, ENV_PORT, ENV_LOG_LEVEL):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "rest.json"


class TestApplyArgs:

    def test_sources(self, config_file, monkeypatch):
        RestConfig(log_file="/tmp/x.log").save(config_file)
        monkeypatch.setenv(ENV_HOST, "0.0.0.0")
        args = main_rest.build_parser().parse_args(['-c', str(config_file), '--port', '9001', '--debug'])

        config = RestConfig.load(args.config)
        sources = main_rest.apply_args(config, args)

        assert config.port == 9001
        assert config.log_level == "DEBUG"
        assert sources['port'] == 'cli'
        assert sources['log_level'] == 'cli'
        assert sources['host'] == 'env'
        assert sources['log_file'] == 'file'
        assert sources['collect_timeout'] == 'default'


class TestMain:

    def test_show_config(self, config_file, capsys):
        assert main_rest.main(['-c', str(config_file), '--show-config']) == 0
        assert "collect_timeout" in capsys.readouterr().out

    def test_requires_simulate(self, config_file):
        with patch.object(main_rest, 'setup_logging'):
            assert main_rest.main(['-c', str(config_file)]) == 1

    def test_invalid_config(self, config_file):
        with patch.object(main_rest, 'setup_logging'):
            assert main_rest.main(['-c', str(config_file), '--simulate', '--port', '0']) == 2

    def test_runs_flask_single_threaded(self, config_file):
        with patch.object(main_rest, 'setup_logging'), \
                patch('flask.Flask.run') as run:
            assert main_rest.main(['-c', str(config_file), '--simulate', '-p', '9100']) == 0

        kwargs = run.call_args.kwargs
        assert kwargs['port'] == 9100
        assert kwargs['host'] == '127.0.0.1'
        assert kwargs['threaded'] is False
