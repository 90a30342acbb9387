from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from zk_query.lsp.types import DisplayOptions


class ServerConfig(BaseModel):
  command: List[str] = Field(default_factory=lambda: ["zk", "lsp"])
  auto_start: bool = True
  timeout: Optional[int] = 30  # seconds, None for no timeout

  @field_validator("command")
  @classmethod
  def _require_command(cls, value: List[str]) -> List[str]:
    if not value:
      raise ValueError("server command must not be empty")
    return value


class ShortcutConfig(BaseModel):
  name: str
  description: Optional[str] = None
  args: Dict[str, Any] = Field(default_factory=dict)

  @model_validator(mode="before")
  @classmethod
  def _apply_aliases(cls, data: Any) -> Any:
    if not isinstance(data, dict):
      return data
    normalized = dict(data)
    if "args" not in normalized and "defaults" in normalized:
      normalized["args"] = normalized.pop("defaults") or {}
    return normalized


class AppConfig(BaseModel):
  server: ServerConfig = Field(default_factory=ServerConfig)
  display: DisplayOptions = Field(default_factory=DisplayOptions)
  recent_limit: int = Field(default=20, ge=1)
  shortcuts: List[ShortcutConfig] = Field(default_factory=list)

  @field_validator("shortcuts")
  @classmethod
  def _unique_shortcut_names(cls, value: List[ShortcutConfig]) -> List[ShortcutConfig]:
    names = [shortcut.name for shortcut in value]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
      raise ValueError(f"duplicate shortcut names: {', '.join(duplicates)}")
    return value

  @property
  def config_path(self) -> Optional[Path]:
    return getattr(self, "_config_path", None)

  def with_path(self, path: Path) -> "AppConfig":
    object.__setattr__(self, "_config_path", path)
    return self
