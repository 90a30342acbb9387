from __future__ import annotations

from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from zk_query.lsp.types import Candidate, TagRecord

console = Console()


def parse_tag_selection(raw: str, vocabulary: Sequence[str]) -> List[str]:
  """Resolve comma-separated tag names or 1-based indexes into tag names."""
  selected: List[str] = []
  for token in raw.split(","):
    token = token.strip()
    if not token:
      continue
    if token.isdigit() and 1 <= int(token) <= len(vocabulary):
      name = vocabulary[int(token) - 1]
    else:
      name = token
    if name not in selected:
      selected.append(name)
  return selected


def parse_candidate_choice(raw: str, candidates: Sequence[Candidate]) -> Optional[Candidate]:
  token = raw.strip()
  if not token.isdigit():
    return None
  index = int(token)
  if not 1 <= index <= len(candidates):
    return None
  return candidates[index - 1]


def select_tags(vocabulary: List[str]) -> List[str]:
  if not vocabulary:
    console.print("[yellow]The notebook has no tags.[/yellow]")
    return []
  table = Table(title="Tags")
  table.add_column("#", justify="right")
  table.add_column("Tag")
  for idx, name in enumerate(vocabulary, start=1):
    table.add_row(str(idx), escape(name))
  console.print(table)
  raw = Prompt.ask("Tags (comma-separated names or numbers)", console=console, default="")
  return parse_tag_selection(raw, vocabulary)


def show_candidates(candidates: Sequence[Candidate], title: str) -> None:
  table = Table(title=title)
  table.add_column("#", justify="right")
  table.add_column("Note")
  table.add_column("Path", style="dim")
  for idx, candidate in enumerate(candidates, start=1):
    table.add_row(str(idx), escape(candidate.display), escape(candidate.path))
  console.print(table)


def pick_candidate(candidates: List[Candidate]) -> Optional[Candidate]:
  show_candidates(candidates, "Notes")
  raw = Prompt.ask("Select a note (blank to cancel)", console=console, default="")
  choice = parse_candidate_choice(raw, candidates)
  if choice is None and raw.strip():
    console.print(f"[yellow]No note numbered {raw.strip()}.[/yellow]")
  return choice


def show_tags(tags: Sequence[TagRecord]) -> None:
  table = Table(title="Tags")
  table.add_column("Tag")
  table.add_column("Notes", justify="right")
  for tag in tags:
    table.add_row(escape(tag.name), str(tag.note_count))
  console.print(table)
