from .loader import ConfigError, load_backend_config, load_yaml_config
from .models import BackendConfig, GlueConfig, LoggingConfig

__all__ = ["BackendConfig", "ConfigError", "GlueConfig", "LoggingConfig", "load_backend_config", "load_yaml_config"]
