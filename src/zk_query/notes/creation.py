from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from rich.console import Console
from rich.markup import escape

from zk_query.config.models import AppConfig
from zk_query.lsp.client import ZK_NEW, CommandInvoker
from zk_query.lsp.errors import NoteCreationAborted, RemoteCommandError
from zk_query.lsp.types import CreationArgs

console = Console(stderr=True)

OpenAction = Callable[[str], Any]
DocumentProvider = Callable[[], Optional[Path | str]]


class NoteCreator:
  """Create notes through `zk.new`; failures are reported and yield None."""

  def __init__(self, invoker: CommandInvoker):
    self._invoker = invoker

  def create(self, document_path: Optional[Path | str], args: Any) -> Optional[str]:
    creation_args = CreationArgs.parse(args)
    try:
      payload = self._invoker.invoke(ZK_NEW, creation_args, document_path)
    except RemoteCommandError as exc:
      console.print(f"[red]Note creation failed:[/red] {escape(str(exc))}")
      return None
    path = payload.get("path") if isinstance(payload, Mapping) else None
    if not isinstance(path, str) or not path:
      console.print("[red]Note creation failed:[/red] zk returned no path for the new note")
      return None
    return path


class NewNoteShortcut:
  """
  A named note-creation command with preset arguments.

  Takes no parameter when the presets fix the title, otherwise exactly one:
  the title of the new note. The created note is handed to `opener`.
  """

  def __init__(
    self,
    name: str,
    defaults: CreationArgs,
    *,
    creator: NoteCreator,
    opener: OpenAction,
    current_document: DocumentProvider,
    description: Optional[str] = None,
  ):
    self.name = name
    self.defaults = defaults
    self.description = description
    self._creator = creator
    self._opener = opener
    self._current_document = current_document

  @property
  def arity(self) -> int:
    return 0 if self.defaults.has_title else 1

  def __call__(self, *params: str) -> str:
    if len(params) != self.arity:
      raise TypeError(
        f"{self.name}() takes {self.arity} argument(s) but {len(params)} were given"
      )
    args = self.defaults.merged(title=params[0]) if params else self.defaults
    path = self._creator.create(self._current_document(), args)
    if path is None:
      raise NoteCreationAborted(f"{self.name}: no note was created")
    self._opener(path)
    return path

  def __repr__(self) -> str:
    return f"NewNoteShortcut(name={self.name!r}, arity={self.arity})"


def define_new_note_shortcut(
  name: str,
  partial: Any,
  *,
  creator: NoteCreator,
  opener: OpenAction,
  current_document: DocumentProvider,
  description: Optional[str] = None,
) -> NewNoteShortcut:
  return NewNoteShortcut(
    name,
    CreationArgs.parse(partial),
    creator=creator,
    opener=opener,
    current_document=current_document,
    description=description,
  )


def shortcuts_from_config(
  config: AppConfig,
  *,
  creator: NoteCreator,
  opener: OpenAction,
  current_document: DocumentProvider,
) -> Dict[str, NewNoteShortcut]:
  return {
    shortcut.name: define_new_note_shortcut(
      shortcut.name,
      shortcut.args,
      creator=creator,
      opener=opener,
      current_document=current_document,
      description=shortcut.description,
    )
    for shortcut in config.shortcuts
  }
