from __future__ import annotations

from typing import Any, List, Mapping

from .types import UNTITLED, NoteRecord, TagRecord

_WRAPPER_KEYS = ("notes", "items", "results", "data")


def normalize_note(raw: Any) -> NoteRecord:
  """Convert a raw note object from the server into a NoteRecord. Never raises."""
  entry: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

  title = entry.get("title")
  if not isinstance(title, str) or not title:
    title = UNTITLED

  raw_tags = entry.get("tags")
  if isinstance(raw_tags, (list, tuple)):
    tags = [tag for tag in raw_tags if isinstance(tag, str)]
  else:
    tags = []

  path = entry.get("path")
  return NoteRecord(
    title=title,
    path=str(path) if path is not None else "",
    tags=tags,
    created=_optional_str(entry.get("created")),
    modified=_optional_str(entry.get("modified")),
  )


def normalize_notes(payload: Any) -> List[NoteRecord]:
  """Normalize a `zk.list` result, dropping entries the user could not open."""
  notes = [normalize_note(entry) for entry in _unwrap_list(payload)]
  return [note for note in notes if note.path]


def normalize_tags(payload: Any) -> List[TagRecord]:
  tags: List[TagRecord] = []
  for entry in _unwrap_list(payload):
    if not isinstance(entry, Mapping):
      continue
    name = entry.get("name")
    if not isinstance(name, str) or not name:
      continue
    count = entry.get("noteCount")
    tags.append(TagRecord(name=name, note_count=count if isinstance(count, int) else 0))
  return tags


def _unwrap_list(payload: Any) -> List[Any]:
  if isinstance(payload, Mapping):
    for key in _WRAPPER_KEYS:
      if key in payload:
        payload = payload[key]
        break
  if isinstance(payload, (list, tuple)):
    return list(payload)
  return []


def _optional_str(value: Any) -> str | None:
  return value if isinstance(value, str) and value else None
