from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from zk_query.lsp.client import ZK_INDEX, ZK_LIST, ZK_TAG_LIST, CommandInvoker
from zk_query.lsp.errors import RemoteCommandError
from zk_query.lsp.formatting import build_candidates
from zk_query.lsp.normalization import normalize_notes, normalize_tags
from zk_query.lsp.types import DisplayOptions, ListOptions, NoteSearchResult, TagRecord

from .query import (
  TAG_SORT,
  build_list_options,
  build_recent_options,
  describe_filter,
  fetch_tag_vocabulary,
)

console = Console(stderr=True)

NO_NOTES_MESSAGE = "No notes found"
DEFAULT_RECENT_LIMIT = 20

TagSelector = Callable[[List[str]], Sequence[str]]


class NoteFinder:
  """Search and list notes of the notebook holding a document."""

  def __init__(self, invoker: CommandInvoker, display: Optional[DisplayOptions] = None):
    self._invoker = invoker
    self._display = display or DisplayOptions()

  def search(
    self,
    document_path: Optional[Path | str],
    query_text: str = "",
    *,
    use_tag_filter: bool = False,
    tag_selector: Optional[TagSelector] = None,
  ) -> NoteSearchResult:
    if use_tag_filter and tag_selector is None:
      raise ValueError("A tag selector is required to filter by tags.")

    def prompt_for_tags() -> Sequence[str]:
      vocabulary = fetch_tag_vocabulary(self._invoker, document_path)
      return tag_selector(vocabulary)

    try:
      options, description = build_list_options(query_text, use_tag_filter, prompt_for_tags)
    except RemoteCommandError as exc:
      console.print(f"[red]Listing tags failed:[/red] {escape(str(exc))}")
      return NoteSearchResult(description=describe_filter(query_text, []))
    return self._list(document_path, options, description, self._display)

  def recent(
    self,
    document_path: Optional[Path | str],
    limit: int = DEFAULT_RECENT_LIMIT,
  ) -> NoteSearchResult:
    display = self._display.model_copy(update={"include_modified": True})
    return self._list(
      document_path,
      build_recent_options(limit),
      f"recently modified: {limit}",
      display,
    )

  def list_tags(self, document_path: Optional[Path | str]) -> List[TagRecord]:
    payload = self._invoker.invoke(ZK_TAG_LIST, {"sort": list(TAG_SORT)}, document_path)
    return normalize_tags(payload)

  def index(self, document_path: Optional[Path | str]) -> Any:
    return self._invoker.invoke(ZK_INDEX, None, document_path)

  def _list(
    self,
    document_path: Optional[Path | str],
    options: ListOptions,
    description: str,
    display: DisplayOptions,
  ) -> NoteSearchResult:
    try:
      payload = self._invoker.invoke(ZK_LIST, options, document_path)
    except RemoteCommandError as exc:
      console.print(f"[red]Listing notes failed:[/red] {escape(str(exc))}")
      return NoteSearchResult(description=description)
    result = NoteSearchResult(
      candidates=build_candidates(normalize_notes(payload), display),
      description=description,
    )
    if result.empty:
      console.print(f"[yellow]{NO_NOTES_MESSAGE}[/yellow] ({escape(description)})")
    return result
