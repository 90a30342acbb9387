from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from zk_query.lsp.client import ZK_TAG_LIST, CommandInvoker
from zk_query.lsp.normalization import normalize_tags
from zk_query.lsp.types import ListOptions

SEARCH_FIELDS = ["title", "path", "tags", "created"]
RECENT_FIELDS = ["title", "path", "tags", "modified"]
LINK_FIELDS = ["title", "path"]
TAG_SORT = ["note-count-"]
RECENT_SORT = ["modified-"]

TagPrompter = Callable[[], Sequence[str]]


def build_list_options(
  query_text: str,
  use_tag_filter: bool,
  tag_prompter: Optional[TagPrompter] = None,
) -> Tuple[ListOptions, str]:
  """Build `zk.list` options for a search plus a description of the filter.

  The tag prompter runs only when `use_tag_filter` is set, and is then required.
  """
  if use_tag_filter and tag_prompter is None:
    raise ValueError("A tag prompter is required to filter by tags.")
  options = ListOptions(select=list(SEARCH_FIELDS))
  if query_text:
    options.match = [query_text]
  tags: List[str] = []
  if use_tag_filter:
    tags = list(tag_prompter())
    options.tags = tags
  return options, describe_filter(query_text, tags)


def describe_filter(query_text: str, tags: Sequence[str]) -> str:
  if tags and query_text:
    return f"tags: {', '.join(tags)}, match: {query_text}"
  if tags:
    return f"tags: {', '.join(tags)}"
  return f"match: {query_text}"


def build_recent_options(limit: int) -> ListOptions:
  return ListOptions(select=list(RECENT_FIELDS), sort=list(RECENT_SORT), limit=limit)


def build_link_options() -> ListOptions:
  return ListOptions(select=list(LINK_FIELDS))


def fetch_tag_vocabulary(invoker: CommandInvoker, document_path: Optional[Path | str]) -> List[str]:
  """Distinct tag names of the notebook, most used first."""
  payload = invoker.invoke(ZK_TAG_LIST, {"sort": list(TAG_SORT)}, document_path)
  return [tag.name for tag in normalize_tags(payload)]
