"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, Optional

import yaml

from fetchers.post_filter import BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM

DEFAULT_CONFIG: Dict[str, Any] = {
    'feed': {
        'post_scheme': BLOGGER_KIND_SCHEME,
        'post_term': BLOGGER_POST_TERM,
    },
    'http': {
        'connect_timeout': 1.0,
        'read_timeout': 30.0,
        'max_indirection': 1,
        'user_agent': 'blogger-markdown-migrator/1.0',
    },
    'converter': {
        'backend': 'markdownify',
        'pandoc_path': 'pandoc',
        'pandoc_format': 'gfm',
        'heading_style': 'ATX',
        'bullets': '-',
    },
    'export': {
        'output_directory': './blogger-export',
        'content_filename': 'index.md',
        'frontmatter_format': 'toml',
        'date_prefix': True,
        'draft': True,
    },
    'migration': {
        'continue_on_error': False,
        'max_workers': 1,
        'dry_run': False,
        'report_path': None,
    },
    'logging': {
        'level': None,
        'file': None,
    },
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration, layering an optional YAML file over the defaults.

        Args:
            config_path: Path to YAML configuration file (None = defaults only)

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        if config_path is None:
            return config

        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        # Substitute environment variables recursively
        config_data = cls._substitute_env_vars_recursive(config_data)

        return _deep_merge(config, config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If validation fails
        """
        for field in ('feed.post_scheme', 'feed.post_term', 'export.output_directory', 'export.content_filename'):
            cls._validate_required_field(config, field)

        content_filename = get_nested(config, 'export.content_filename')
        if '/' in content_filename or '\\' in content_filename:
            raise ValueError("export.content_filename must be a plain file name")

        frontmatter_format = get_nested(config, 'export.frontmatter_format', 'toml')
        if frontmatter_format not in ['toml', 'yaml']:
            raise ValueError("export.frontmatter_format must be 'toml' or 'yaml'")

        backend = get_nested(config, 'converter.backend', 'markdownify')
        if backend not in ['markdownify', 'pandoc']:
            raise ValueError("converter.backend must be 'markdownify' or 'pandoc'")

        connect_timeout = get_nested(config, 'http.connect_timeout', 1.0)
        if isinstance(connect_timeout, bool) or not isinstance(connect_timeout, (int, float)) or connect_timeout <= 0:
            raise ValueError("http.connect_timeout must be a positive number")

        read_timeout = get_nested(config, 'http.read_timeout', 30.0)
        if read_timeout is not None and (
            isinstance(read_timeout, bool) or not isinstance(read_timeout, (int, float)) or read_timeout <= 0
        ):
            raise ValueError("http.read_timeout must be a positive number or null")

        max_indirection = get_nested(config, 'http.max_indirection', 1)
        if isinstance(max_indirection, bool) or not isinstance(max_indirection, int) or max_indirection < 0:
            raise ValueError("http.max_indirection must be a non-negative integer")

        max_workers = get_nested(config, 'migration.max_workers', 1)
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ValueError("migration.max_workers must be a positive integer")

        log_level = get_nested(config, 'logging.level')
        if log_level is not None and str(log_level).upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError("logging.level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")

        for flag in ('export.date_prefix', 'export.draft', 'migration.continue_on_error', 'migration.dry_run'):
            if not isinstance(get_nested(config, flag), bool):
                raise ValueError(f"{flag} must be a boolean")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.
        """
        merged = copy.deepcopy(config)
        for section in ('export', 'converter', 'migration', 'logging'):
            merged.setdefault(section, {})

        if getattr(args, 'outdir', None):
            merged['export']['output_directory'] = str(args.outdir)

        if getattr(args, 'frontmatter', None):
            merged['export']['frontmatter_format'] = args.frontmatter

        if getattr(args, 'converter', None):
            merged['converter']['backend'] = args.converter

        if getattr(args, 'continue_on_error', None) is not None:
            merged['migration']['continue_on_error'] = args.continue_on_error

        if getattr(args, 'max_workers', None) is not None:
            merged['migration']['max_workers'] = args.max_workers

        if getattr(args, 'dry_run', None) is not None:
            merged['migration']['dry_run'] = args.dry_run

        if getattr(args, 'report', None):
            merged['migration']['report_path'] = args.report

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into ``base`` recursively and return ``base``."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "export.output_directory")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    value = config

    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested']
