from __future__ import annotations

from typing import Optional


class ZkQueryError(Exception):
  """Base class for errors raised by the zk query layer."""

  def __init__(self, message: str):
    super().__init__(message)
    self.message = message


class NotBoundError(ZkQueryError):
  """Raised when the active document has no concrete backing file."""


class NoSessionError(ZkQueryError):
  """Raised when no zk server session serves the document's notebook."""


class MalformedArgsError(ZkQueryError):
  """Raised when note creation arguments fail shape validation."""


class RemoteCommandError(ZkQueryError):
  """Raised when the server (or the transport to it) reports a failure."""

  def __init__(self, command: str, message: str, code: Optional[int] = None):
    super().__init__(message)
    self.command = command
    self.code = code

  def __str__(self) -> str:
    if self.code is not None:
      return f"{self.command} failed ({self.code}): {self.message}"
    return f"{self.command} failed: {self.message}"


class NoteCreationAborted(ZkQueryError):
  """User-facing abort raised when a creation shortcut yields no note."""


class FormatDegradation(UserWarning):
  """Warning category for values displayed raw because they could not be parsed."""
