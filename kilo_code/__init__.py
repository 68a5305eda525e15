"""Kilo Code Python SDK - Custom Mode Configuration"""

from .modes import (
    CustomModesManager,
    DuplicateSlugError,
    ModeConfig,
    ModeConfigError,
    ModeSource,
    StaticPathProvider,
)
from .settings import ModesSettings, load_settings

__version__ = "0.1.0"
__all__ = [
    "CustomModesManager",
    "DuplicateSlugError",
    "ModeConfig",
    "ModeConfigError",
    "ModeSource",
    "StaticPathProvider",
    "ModesSettings",
    "load_settings",
]
