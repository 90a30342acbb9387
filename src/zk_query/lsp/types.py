from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import MalformedArgsError

UNTITLED = "Untitled"


def _is_keyword(name: Any) -> bool:
  return isinstance(name, str) and name.isidentifier() and not name.startswith("_")


class NoteRecord(BaseModel):
  model_config = ConfigDict(extra="ignore")

  path: str
  title: str = UNTITLED
  tags: List[str] = Field(default_factory=list)
  created: Optional[str] = None
  modified: Optional[str] = None


class TagRecord(BaseModel):
  model_config = ConfigDict(extra="ignore", populate_by_name=True)

  name: str
  note_count: int = Field(default=0, alias="noteCount")


class Candidate(BaseModel):
  display: str
  path: str


class DisplayOptions(BaseModel):
  include_tags: bool = True
  include_created: bool = False
  include_modified: bool = False


class NoteSearchResult(BaseModel):
  candidates: List[Candidate] = Field(default_factory=list)
  description: str = ""

  @property
  def empty(self) -> bool:
    return not self.candidates

  @property
  def paths(self) -> List[str]:
    return [candidate.path for candidate in self.candidates]


class ListOptions(BaseModel):
  """
  Arguments of the `zk.list` command.

  Unknown filters supported by the server (`hrefs`, `createdAfter`, ...) can be
  passed as extra keyword fields; their names must be plain identifiers.
  """

  model_config = ConfigDict(extra="allow")

  select: List[str] = Field(default_factory=list)
  match: Optional[List[str]] = None
  tags: Optional[List[str]] = None
  sort: Optional[List[str]] = None
  limit: Optional[int] = Field(default=None, ge=1)

  @field_validator("select")
  @classmethod
  def _dedupe_select(cls, value: List[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for name in value:
      seen.setdefault(name, None)
    return list(seen)

  @field_validator("sort")
  @classmethod
  def _check_sort_terms(cls, value: Optional[List[str]]) -> Optional[List[str]]:
    for term in value or []:
      if not term.rstrip("+-"):
        raise ValueError(f"invalid sort term: {term!r}")
    return value

  @model_validator(mode="after")
  def _check_extra_names(self) -> "ListOptions":
    for key in self.model_extra or {}:
      if not _is_keyword(key):
        raise ValueError(f"invalid list option name: {key!r}")
    return self

  def to_command_args(self) -> Dict[str, Any]:
    return self.model_dump(mode="json", exclude_none=True)


class CreationArgs(BaseModel):
  """
  Arguments of the `zk.new` command.

  Build instances with `CreationArgs.parse`, which accepts either a mapping or
  a flat alternating key/value sequence such as `[":title", "X", ":dir", "y"]`.
  """

  model_config = ConfigDict(extra="allow", populate_by_name=True)

  title: Optional[str] = None
  content: Optional[str] = None
  dir: Optional[str] = None
  group: Optional[str] = None
  template: Optional[str] = None
  extra: Optional[Dict[str, Any]] = None
  date: Optional[str] = None
  edit: Optional[bool] = None
  dry_run: Optional[bool] = Field(default=None, alias="dryRun")
  insert_link_at_location: Optional[Dict[str, Any]] = Field(
    default=None, alias="insertLinkAtLocation"
  )

  @classmethod
  def parse(cls, raw: Any) -> "CreationArgs":
    if isinstance(raw, CreationArgs):
      return raw
    fields: Dict[str, Any] = {}
    for key, value in _keyword_pairs(raw):
      name = key[1:] if isinstance(key, str) and key.startswith(":") else key
      if not _is_keyword(name):
        raise MalformedArgsError(f"Not a keyword argument name: {key!r}")
      fields[name] = value
    try:
      return cls.model_validate(fields)
    except ValidationError as exc:
      raise MalformedArgsError(f"Invalid note creation arguments: {exc}") from exc

  @property
  def has_title(self) -> bool:
    return bool(self.title)

  def merged(self, **overrides: Any) -> "CreationArgs":
    data = self.to_command_args()
    data.update({key: value for key, value in overrides.items() if value is not None})
    return CreationArgs.parse(data)

  def to_command_args(self) -> Dict[str, Any]:
    return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _keyword_pairs(raw: Any) -> Iterable[Tuple[Any, Any]]:
  if raw is None:
    return []
  if isinstance(raw, Mapping):
    return list(raw.items())
  if isinstance(raw, (list, tuple)):
    if len(raw) % 2:
      raise MalformedArgsError(
        f"Expected an even number of keyword arguments, got {len(raw)}"
      )
    return list(zip(raw[0::2], raw[1::2]))
  raise MalformedArgsError(f"Unsupported note creation arguments: {type(raw).__name__}")
