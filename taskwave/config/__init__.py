from .loader import load_settings
from .types import ConfigError, RunSettings, UnsupportedConfigFormatError

__all__ = ["load_settings", "RunSettings", "ConfigError", "UnsupportedConfigFormatError"]
