from __future__ import annotations

import warnings
from datetime import datetime
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from .errors import FormatDegradation
from .types import Candidate, DisplayOptions, NoteRecord

DATETIME_DISPLAY_FORMAT = "%m/%d/%y %H:%M:%S"

console = Console(stderr=True)


def format_datetime(value: Optional[str]) -> Optional[str]:
  """Render an ISO-8601 timestamp as local `MM/DD/YY HH:MM:SS`.

  Unparseable values are returned unchanged so the caller can still show them.
  """
  if value is None:
    return None
  try:
    parsed = datetime.fromisoformat(value.strip())
  except (TypeError, ValueError) as exc:
    message = f"Could not parse datetime {value!r}: {exc}"
    warnings.warn(message, FormatDegradation, stacklevel=2)
    console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
    return value
  return parsed.astimezone().strftime(DATETIME_DISPLAY_FORMAT)


def format_candidate(note: NoteRecord, options: DisplayOptions) -> str:
  parts = [note.title]
  if options.include_tags and note.tags:
    parts.append(f" [{', '.join(note.tags)}]")
  if options.include_created and note.created:
    parts.append(f" ({format_datetime(note.created)})")
  if options.include_modified and note.modified:
    parts.append(f" ({format_datetime(note.modified)})")
  return "".join(parts)


def build_candidates(
  notes: Sequence[NoteRecord],
  options: Optional[DisplayOptions] = None,
) -> List[Candidate]:
  """Map notes to (display, path) candidates for a selection prompt."""
  display_options = options or DisplayOptions()
  return [
    Candidate(display=format_candidate(note, display_options), path=note.path)
    for note in notes
  ]
