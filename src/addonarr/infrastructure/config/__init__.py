from __future__ import annotations

from .load import load_config
from .schema import AddonsConfig, AppConfig, DebridConfig, EnvOverrides, PlayerConfig

__all__ = [
    "AddonsConfig",
    "AppConfig",
    "DebridConfig",
    "EnvOverrides",
    "PlayerConfig",
    "load_config",
]
