# Initializes config package (imports Settings instance)

from .config import Settings, describe_settings_error, get_env, settings

__all__ = ["Settings", "settings", "get_env", "describe_settings_error"]
