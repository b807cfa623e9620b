import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field


@dataclass
class CacheConfig:
    """Where the cache snapshot lives"""
    store: str = "file"  # 'file' or 'memory'
    cache_dir: str = "./.cache/assetsync"
    cache_file: str = "cacheData.json"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class GlobalConfig:
    """Process-wide settings shared by every sync target"""
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GlobalConfig':
        """Create GlobalConfig from dictionary"""
        return cls(
            cache=CacheConfig(**data.get('cache', {})),
            logging=LoggingConfig(**data.get('logging', {})),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GlobalConfig':
        """Load GlobalConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            # Return default config if file doesn't exist
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def default(cls) -> 'GlobalConfig':
        """Return default configuration"""
        return cls()


def load_global_config(config_path: Optional[str] = None) -> GlobalConfig:
    """
    Load global configuration.

    Looks at, in order: the explicit path, $ASSETSYNC_CONFIG, ./assetsync.yaml.
    Falls back to defaults when none exists.
    """
    if config_path:
        return GlobalConfig.from_yaml(config_path)

    env_path = os.environ.get('ASSETSYNC_CONFIG')
    if env_path:
        return GlobalConfig.from_yaml(env_path)

    return GlobalConfig.from_yaml('./assetsync.yaml')
