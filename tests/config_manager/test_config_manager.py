import json
from unittest.mock import patch

import pytest

from crossvalidation.config_manager import DEFAULT_CONFIG, ConfigurationManager, resolve_config
from crossvalidation.utils.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        'execution': {'n_jobs': 1, 'backend': 'threading'},
        'search': {'seed': 42},
    }))
    return path


def test_defaults_applied():
    config = ConfigurationManager.from_dict(None)
    assert config['execution'] == DEFAULT_CONFIG['execution']
    assert config['search']['max_sasha_rounds'] == 1000
    assert config['_internal_seeds'] == {'sampling': None, 'annealing': None}


def test_defaults_not_mutated():
    ConfigurationManager.from_dict({'search': {'rate': 4}})
    assert DEFAULT_CONFIG['search']['rate'] == 2


def test_load_from_file(config_file):
    config = ConfigurationManager(str(config_file)).load_and_validate()
    assert config['execution']['backend'] == 'threading'
    assert config['logging']['level'] == 'INFO'
    assert config['_internal_seeds'] == {'sampling': 1042, 'annealing': 2042}


def test_overrides_win_over_file(config_file):
    config = ConfigurationManager(str(config_file)).load_and_validate({'search': {'seed': 1}})
    assert config['_internal_seeds']['sampling'] == 1001


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="File not found"):
        ConfigurationManager(str(tmp_path / "nope.json")).load_and_validate()


def test_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        ConfigurationManager(str(path)).load_and_validate()


@pytest.mark.parametrize("overrides", [
    {'execution': {'backend': 'dask'}},
    {'execution': {'n_jobs': 'all'}},
    {'search': {'rate': 'fast'}},
])
def test_schema_violations(overrides):
    with pytest.raises(ConfigurationError, match="Schema validation failed"):
        ConfigurationManager.from_dict(overrides)


@pytest.mark.parametrize("overrides", [
    {'execution': {'n_jobs': 0}},
    {'execution': {'n_jobs': -2}},
    {'search': {'seed': -1}},
    {'search': {'rate': 1}},
    {'search': {'hyperband_rate': 0.5}},
    {'search': {'temperature': 0}},
    {'search': {'max_sasha_rounds': 0}},
    {'logging': {'level': 'LOUD'}},
])
def test_logic_violations(overrides):
    with pytest.raises(ConfigurationError):
        ConfigurationManager.from_dict(overrides)


def test_resource_warning():
    manager = ConfigurationManager()
    with patch('psutil.cpu_count', return_value=2), patch.object(manager.logger, 'warning') as warning:
        manager.load_and_validate({'execution': {'n_jobs': 8}})
    warning.assert_called_once()
    assert "exceeds available CPU cores" in warning.call_args[0][0]


def test_resolve_config_passes_hydrated_through():
    config = resolve_config({'search': {'seed': 3}})
    assert resolve_config(config) is config
