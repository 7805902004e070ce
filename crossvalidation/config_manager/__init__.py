"""
Configuration Manager Module
============================

Responsibility:
- Loading of JSON configuration files merged over package defaults.
- Enforcement of schema constraints and logical bounds.
- Resource guardrails (worker count vs. CPU cores).
- Deterministic seed propagation for reproducibility.
"""

from .config_manager import ConfigurationManager, DEFAULT_CONFIG, CONFIG_SCHEMA, resolve_config

__all__ = ['ConfigurationManager', 'DEFAULT_CONFIG', 'CONFIG_SCHEMA', 'resolve_config']
