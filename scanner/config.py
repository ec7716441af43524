"""
load the config from config.yaml and environment variables
"""

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

DEFAULTS: Dict[str, Any] = {
    'input': {'file': 'websites.xlsx'},
    'output': {'file': None},
    'classifier': {'keywords': ['keyword1', 'keyword2']},
    'pool': {'concurrency': 5, 'task_delay': 1.0},
    'fetcher': {
        'timeout': 30.0,
        'max_redirects': 10,
        'user_agent': DEFAULT_USER_AGENT,
    },
    'logging': {'level': 'INFO', 'format': 'console'},
}


@dataclass(frozen=True)
class ScanSettings:
    """Immutable settings for a single scan run."""

    input_file: str
    output_file: Optional[str]
    keywords: Tuple[str, ...]
    concurrency: int
    task_delay: float
    timeout: float
    max_redirects: int
    user_agent: str
    log_level: str = 'INFO'
    log_format: str = 'console'


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Configuration loader that reads from config.yaml and environment variables."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to a YAML file. If None, only the built-in
                        defaults and environment variables are used.
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file and override with environment variables."""
        config: Dict[str, Any] = {}
        if self.config_path is not None:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    config = yaml.safe_load(f) or {}
            except FileNotFoundError:
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in configuration file: {e}")

            if not isinstance(config, dict):
                raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")

        config = _deep_merge(DEFAULTS, config)
        return self._apply_env_overrides(config)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        env_mappings = {
            'SCAN_INPUT_FILE': ('input', 'file'),
            'SCAN_OUTPUT_FILE': ('output', 'file'),
            'SCAN_KEYWORDS': ('classifier', 'keywords'),
            'SCAN_CONCURRENCY': ('pool', 'concurrency'),
            'SCAN_TASK_DELAY': ('pool', 'task_delay'),
            'FETCHER_TIMEOUT': ('fetcher', 'timeout'),
            'FETCHER_USER_AGENT': ('fetcher', 'user_agent'),
            'LOG_LEVEL': ('logging', 'level'),
            'LOG_FORMAT': ('logging', 'format'),
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                current = config
                for key in config_path[:-1]:
                    if key not in current:
                        current[key] = {}
                    current = current[key]

                final_key = config_path[-1]
                if env_var == 'SCAN_KEYWORDS':
                    current[final_key] = env_value.split(',')
                else:
                    current[final_key] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str):
        """Convert environment variable string to appropriate Python type."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, *keys, default=None):
        """Get configuration value by nested keys.

        Args:
            *keys: Configuration keys (e.g., 'pool', 'concurrency')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current = self._config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    @property
    def input(self) -> Dict[str, Any]:
        return self.get('input', default={})

    @property
    def output(self) -> Dict[str, Any]:
        return self.get('output', default={})

    @property
    def pool(self) -> Dict[str, Any]:
        """Get worker pool configuration."""
        return self.get('pool', default={})

    @property
    def fetcher(self) -> Dict[str, Any]:
        """Get HTTP fetcher configuration."""
        return self.get('fetcher', default={})

    @property
    def logging(self) -> Dict[str, Any]:
        return self.get('logging', default={})

    @property
    def keywords(self) -> Tuple[str, ...]:
        """Get the keyword set with blank entries removed."""
        raw = self.get('classifier', 'keywords', default=[])
        if isinstance(raw, str):
            raw = raw.split(',')
        elif not isinstance(raw, (list, tuple)):
            raw = [raw]
        return tuple(str(k).strip() for k in raw if k is not None and str(k).strip())

    def to_settings(self, **overrides) -> ScanSettings:
        """Build validated run settings; non-None keyword arguments win over config values."""
        values = {
            'input_file': self.input.get('file'),
            'output_file': self.output.get('file'),
            'keywords': self.keywords,
            'concurrency': self.pool.get('concurrency'),
            'task_delay': self.pool.get('task_delay'),
            'timeout': self.fetcher.get('timeout'),
            'max_redirects': self.fetcher.get('max_redirects'),
            'user_agent': self.fetcher.get('user_agent'),
            'log_level': str(self.logging.get('level', 'INFO')).upper(),
            'log_format': str(self.logging.get('format', 'console')).lower(),
        }
        for key, value in overrides.items():
            if key not in values:
                raise TypeError(f"Unknown setting: {key}")
            if value is not None:
                values[key] = value

        values['keywords'] = tuple(k.strip() for k in values['keywords'] if k and k.strip())

        try:
            values['concurrency'] = int(values['concurrency'])
            values['task_delay'] = float(values['task_delay'])
            values['timeout'] = float(values['timeout'])
            values['max_redirects'] = int(values['max_redirects'])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid numeric setting: {e}")

        if not values['input_file']:
            raise ValueError("Input file is not configured")
        if values['concurrency'] < 1:
            raise ValueError(f"Concurrency must be at least 1, got {values['concurrency']}")
        if values['task_delay'] < 0:
            raise ValueError(f"Task delay must not be negative, got {values['task_delay']}")
        if values['timeout'] <= 0:
            raise ValueError(f"Timeout must be positive, got {values['timeout']}")
        if not values['keywords']:
            raise ValueError("At least one keyword is required")
        if values['log_format'] not in ('json', 'console'):
            raise ValueError(f"Unknown log format: {values['log_format']}")

        return ScanSettings(**values)
