from __future__ import annotations

from .loader import load_config
from .models import AppConfig, ServerConfig, ShortcutConfig

__all__ = [
  "load_config",
  "AppConfig",
  "ServerConfig",
  "ShortcutConfig",
]
