"""
Configuration module.

Default parameters, YAML settings with override precedence, validation,
and vesting-type definition files.
"""

from .defaults import DefaultConfig, get_default_config
from .loader import ConfigLoader

__all__ = ["DefaultConfig", "get_default_config", "ConfigLoader"]
