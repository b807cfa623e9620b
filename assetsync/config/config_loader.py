import re

import yaml
from typing import Any, Dict, List

from ..core.enums import Zone
from ..core.exceptions import ConfigError
from ..core.models import SyncOptions
from ..utils.name_filter import to_filter_set


# camelCase spellings accepted for compatibility with webpack-style configs
KEY_ALIASES = {
    'accessKey': 'access_key',
    'secretKey': 'secret_key',
    'refreshFilters': 'refresh_filters',
    'maxConcurrency': 'max_concurrency',
    'chunkSize': 'max_concurrency',
}

DEFAULT_TIMEOUT_MS = 600000
DEFAULT_MAX_CONCURRENCY = 20


class ConfigLoader:
    """Load and validate sync target options"""

    @staticmethod
    def load_from_yaml(file_path: str) -> SyncOptions:
        """Load options from a YAML file"""
        try:
            with open(file_path, 'r') as file:
                config_dict = yaml.safe_load(file)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read config file {file_path}: {e}") from e

        if config_dict is None:
            raise ConfigError(f"Empty or invalid YAML file: {file_path}")
        if not isinstance(config_dict, dict):
            raise ConfigError(f"Config file {file_path} must contain a mapping")

        return ConfigLoader.load_from_dict(config_dict)

    @staticmethod
    def load_from_dict(config_dict: Dict[str, Any]) -> SyncOptions:
        """Load options from a dictionary; raises ConfigError on invalid input"""
        data = ConfigLoader._normalize_keys(config_dict)

        issues = ConfigLoader.validate_config(data)
        if issues:
            raise ConfigError("; ".join(issues))

        timeout = data.get('timeout')
        if not ConfigLoader._is_int(timeout):
            timeout = DEFAULT_TIMEOUT_MS

        max_concurrency = data.get('max_concurrency')
        if max_concurrency is None:
            max_concurrency = DEFAULT_MAX_CONCURRENCY

        refresh = data.get('refresh', False)
        delete = data.get('delete', False)

        try:
            include = to_filter_set(data.get('include'))
            exclude = to_filter_set(data.get('exclude'))
            refresh_filters = to_filter_set(data.get('refresh_filters'))
        except (ValueError, TypeError, re.error) as e:
            raise ConfigError(f"Invalid filter: {e}") from e

        return SyncOptions(
            access_key=data['access_key'],
            secret_key=data['secret_key'],
            bucket=data['bucket'],
            cdn=ConfigLoader._normalize_cdn(data['cdn']),
            zone=ConfigLoader._parse_zone(data['zone']),
            timeout=timeout,
            include=include,
            exclude=exclude,
            refresh=refresh if isinstance(refresh, bool) else bool(refresh),
            refresh_filters=refresh_filters,
            delete=delete if isinstance(delete, bool) else False,
            prefix=ConfigLoader._normalize_prefix(data.get('prefix')),
            max_concurrency=max_concurrency,
        )

    @staticmethod
    def validate_config(data: Dict[str, Any]) -> List[str]:
        """Collect validation issues for normalized option data"""
        issues = []

        for key in ('access_key', 'secret_key', 'bucket', 'cdn', 'zone'):
            value = data.get(key)
            if not value or not isinstance(value, str):
                issues.append(f"{key} is required")

        cdn = data.get('cdn')
        if isinstance(cdn, str) and cdn and not cdn.startswith(('http://', 'https://')):
            issues.append(f'cdn: "{cdn}" must have http or https prefix')

        zone = data.get('zone')
        if isinstance(zone, str) and zone:
            try:
                ConfigLoader._parse_zone(zone)
            except ConfigError as e:
                issues.append(str(e))

        max_concurrency = data.get('max_concurrency')
        if max_concurrency is not None and (not ConfigLoader._is_int(max_concurrency) or max_concurrency < 1):
            issues.append(f"max_concurrency must be a positive integer, got {max_concurrency!r}")

        timeout = data.get('timeout')
        if ConfigLoader._is_int(timeout) and timeout <= 0:
            issues.append(f"timeout must be positive, got {timeout}")

        prefix = data.get('prefix')
        if prefix is not None and not isinstance(prefix, str):
            issues.append("prefix must be a string")

        return issues

    @staticmethod
    def _normalize_keys(config_dict: Dict[str, Any]) -> Dict[str, Any]:
        data = {}
        for key, value in config_dict.items():
            data[KEY_ALIASES.get(key, key)] = value
        return data

    @staticmethod
    def _normalize_cdn(cdn: str) -> str:
        if not cdn.endswith('/'):
            cdn += '/'
        return cdn

    @staticmethod
    def _normalize_prefix(prefix: Any) -> str:
        if not prefix:
            return ""
        prefix = prefix.lstrip('/')
        if prefix and not prefix.endswith('/'):
            prefix += '/'
        return prefix

    @staticmethod
    def _parse_zone(zone: str) -> Zone:
        # Accept the SDK constant spelling too, e.g. "Zone_z0"
        name = zone[len('Zone_'):] if zone.startswith('Zone_') else zone
        try:
            return Zone(name)
        except ValueError:
            valid = ', '.join(z.value for z in Zone)
            raise ConfigError(f"zone: unknown zone '{zone}'. Valid zones: {valid}")

    @staticmethod
    def _is_int(value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)
