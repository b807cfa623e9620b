from .config_loader import ConfigLoader
from .global_config_loader import GlobalConfig, CacheConfig, LoggingConfig, load_global_config

__all__ = ['ConfigLoader', 'GlobalConfig', 'CacheConfig', 'LoggingConfig', 'load_global_config']
