from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from lsprotocol import types as lsp
from lsprotocol.converters import get_converter
from rich.console import Console
from rich.markup import escape

from zk_query.lsp.client import ZK_LINK, ZK_LIST, CommandInvoker
from zk_query.lsp.errors import NotBoundError, RemoteCommandError
from zk_query.lsp.formatting import build_candidates
from zk_query.lsp.normalization import normalize_notes
from zk_query.lsp.types import Candidate, DisplayOptions

from .finder import NO_NOTES_MESSAGE
from .query import build_link_options

console = Console(stderr=True)
_converter = get_converter()

Picker = Callable[[List[Candidate]], Optional[Candidate]]


def point_location(document_path: Path | str, line: int, column: int) -> Dict[str, Any]:
  """LSP location of a zero-width range at `line`/`column` (both zero-based)."""
  position = lsp.Position(line=line, character=column)
  location = lsp.Location(
    uri=Path(document_path).expanduser().absolute().as_uri(),
    range=lsp.Range(start=position, end=position),
  )
  return _converter.unstructure(location)


class LinkInserter:
  def __init__(self, invoker: CommandInvoker):
    self._invoker = invoker

  def insert(
    self,
    document_path: Optional[Path | str],
    line: int,
    column: int,
    picker: Picker,
  ) -> Optional[str]:
    """Let the user pick a note and link to it at the given position.

    Returns the linked note's path, or None when nothing was picked.
    """
    if not document_path:
      raise NotBoundError("Links can only be inserted into a file-backed document")
    try:
      payload = self._invoker.invoke(ZK_LIST, build_link_options(), document_path)
    except RemoteCommandError as exc:
      console.print(f"[red]Listing notes failed:[/red] {escape(str(exc))}")
      return None
    candidates = build_candidates(normalize_notes(payload), DisplayOptions(include_tags=False))
    if not candidates:
      console.print(f"[yellow]{NO_NOTES_MESSAGE}[/yellow]")
      return None
    choice = picker(candidates)
    if choice is None:
      return None
    self._invoker.invoke(
      ZK_LINK,
      {"path": choice.path, "location": point_location(document_path, line, column)},
      document_path,
    )
    return choice.path
