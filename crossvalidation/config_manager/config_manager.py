import copy
import json
import logging
import os
from typing import Any, Dict, Optional

import jsonschema
import psutil

from crossvalidation.utils.exceptions import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    'execution': {
        'n_jobs': 1,
        'backend': 'loky',
        'verbose': 0,
    },
    'search': {
        'seed': None,
        'rate': 2,
        'hyperband_rate': 3,
        'temperature': 1.0,
        'max_sasha_rounds': 1000,
    },
    'logging': {
        'level': 'INFO',
        'log_to_console': True,
        'colorful_console': True,
        'log_to_file': False,
        'log_dir': 'logs',
    },
}

CONFIG_SCHEMA: Dict[str, Any] = {
    'type': 'object',
    'properties': {
        'execution': {
            'type': 'object',
            'properties': {
                'n_jobs': {'type': 'integer'},
                'backend': {'enum': ['loky', 'threading', 'multiprocessing', 'sequential']},
                'verbose': {'type': 'integer', 'minimum': 0},
            },
        },
        'search': {
            'type': 'object',
            'properties': {
                'seed': {'type': ['integer', 'null']},
                'rate': {'type': 'number'},
                'hyperband_rate': {'type': 'number'},
                'temperature': {'type': 'number'},
                'max_sasha_rounds': {'type': 'integer'},
            },
        },
        'logging': {
            'type': 'object',
            'properties': {
                'level': {'type': 'string'},
                'log_to_console': {'type': 'boolean'},
                'colorful_console': {'type': 'boolean'},
                'log_to_file': {'type': 'boolean'},
                'log_dir': {'type': 'string'},
            },
        },
    },
    'required': ['execution', 'search', 'logging'],
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigurationManager:
    """
    Loads, validates and hydrates the configuration shared by all engines.

    User settings (a JSON file or a dict) are merged over DEFAULT_CONFIG, then
    checked against CONFIG_SCHEMA, logical bounds and the machine's resources.
    Finally the master seed is propagated to the per-component seeds.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path (str): Optional path to a user configuration JSON.
        """
        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self.logger = logging.getLogger("config_manager")

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Validate an in-memory configuration and return the hydrated copy."""
        manager = cls()
        return manager.load_and_validate(config or {})

    def load_and_validate(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Main entry point. Loads config, validates schema/logic/resources,
        applies defaults, and propagates seeds.

        Raises:
            ConfigurationError: If any validation step fails.
        """
        user_config = self._load_json(self.config_path) if self.config_path else {}
        if overrides:
            user_config = _deep_merge(user_config, overrides)
        self.config = _deep_merge(DEFAULT_CONFIG, user_config)

        self._validate_schema()
        self._validate_logic()
        self._validate_resources()
        self._propagate_seeds()

        return self.config

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigurationError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {str(e)}")

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Bounds checking of numeric settings."""
        execution = self.config['execution']
        n_jobs = execution['n_jobs']
        if n_jobs == 0 or n_jobs < -1:
            raise ConfigurationError(f"execution.n_jobs must be -1 (all cores) or a positive integer, got {n_jobs}")

        search = self.config['search']
        seed = search.get('seed')
        if seed is not None and seed < 0:
            raise ConfigurationError(f"search.seed must be non-negative, got {seed}")
        for key in ('rate', 'hyperband_rate'):
            if not search[key] > 1:
                raise ConfigurationError(f"search.{key} must be > 1, got {search[key]}")
        if not search['temperature'] > 0:
            raise ConfigurationError(f"search.temperature must be > 0, got {search['temperature']}")
        if search['max_sasha_rounds'] < 1:
            raise ConfigurationError(f"search.max_sasha_rounds must be >= 1, got {search['max_sasha_rounds']}")

        level = self.config['logging']['level'].upper()
        if not isinstance(getattr(logging, level, None), int):
            raise ConfigurationError(f"Unknown logging level: {self.config['logging']['level']}")

    def _validate_resources(self) -> None:
        """Warn when more workers are requested than the machine has cores."""
        n_jobs = self.config['execution']['n_jobs']
        cpu_count = psutil.cpu_count(logical=True) or 1
        if n_jobs > cpu_count:
            self.logger.warning(
                f"Configured n_jobs ({n_jobs}) exceeds available CPU cores ({cpu_count}). "
                "Workers will compete for cores."
            )

    def _propagate_seeds(self) -> None:
        """
        Derive per-component seeds from the master seed.
        Uses large, non-overlapping offsets to avoid correlation between components.
        """
        master_seed = self.config['search'].get('seed')
        if master_seed is None:
            self.config['_internal_seeds'] = {'sampling': None, 'annealing': None}
            return

        self.config['_internal_seeds'] = {
            'sampling': master_seed + 1000,
            'annealing': master_seed + 2000,
        }
        self.logger.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")


def resolve_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return a validated configuration; already hydrated dicts pass through."""
    if config is not None and '_internal_seeds' in config:
        return config
    return ConfigurationManager.from_dict(config)
