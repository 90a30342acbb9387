from __future__ import annotations

import json
import re
import sys
from typing import Any, BinaryIO, Dict, List, Optional

COMMANDS = ["zk.index", "zk.list", "zk.tag.list", "zk.new", "zk.link"]

NOTES: List[Dict[str, Any]] = [
  {
    "title": "Reading list",
    "path": "reading-list.md",
    "tags": ["books", "todo"],
    "created": "2024-03-01T09:30:00Z",
    "modified": "2024-03-04T18:00:00Z",
    "wordCount": 120,
  },
  {
    "title": "Standup notes",
    "path": "journal/daily/2024-03-05.md",
    "tags": ["work"],
    "created": "2024-03-05T08:00:00Z",
    "modified": "2024-03-05T08:15:00Z",
  },
  {
    "path": "drafts/untitled.md",
    "tags": None,
    "created": "2024-02-11T12:00:00Z",
  },
]

TAGS = [
  {"name": "work", "noteCount": 12},
  {"name": "books", "noteCount": 4},
  {"name": "todo", "noteCount": 1},
]


def _read_message(stream: BinaryIO) -> Optional[Dict[str, Any]]:
  headers: Dict[str, str] = {}
  while True:
    line = stream.readline()
    if not line:
      return None
    text = line.decode("ascii").strip()
    if not text:
      break
    key, _, value = text.partition(":")
    headers[key.strip().lower()] = value.strip()
  length = int(headers.get("content-length", "0"))
  return json.loads(stream.read(length).decode("utf-8"))


def _write_message(payload: Dict[str, Any]) -> None:
  body = json.dumps(payload).encode("utf-8")
  sys.stdout.buffer.write(f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body)
  sys.stdout.buffer.flush()


def _slug(title: str) -> str:
  return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-") or "note"


def _list_notes(options: Dict[str, Any]) -> List[Dict[str, Any]]:
  notes = NOTES
  for term in options.get("match") or []:
    notes = [note for note in notes if term.lower() in (note.get("title") or "").lower()]
  for tag in options.get("tags") or []:
    notes = [note for note in notes if tag in (note.get("tags") or [])]
  select = options.get("select") or []
  if not select:
    return [dict(note) for note in notes]
  return [{key: note[key] for key in select if key in note} for note in notes]


def _execute(params: Dict[str, Any]) -> Any:
  command = params.get("command")
  arguments = params.get("arguments") or []
  options = arguments[1] if len(arguments) > 1 else {}
  if command == "zk.index":
    return {"added": 0, "modified": 1, "removed": 0}
  if command == "zk.list":
    return _list_notes(options)
  if command == "zk.tag.list":
    return TAGS
  if command == "zk.new":
    title = options.get("title") or "untitled"
    directory = options.get("dir")
    name = f"{_slug(title)}.md"
    return {"path": f"{directory}/{name}" if directory else name}
  if command == "zk.link":
    return None
  raise ValueError(f"boom: unknown command {command}")


def _handle(message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
  method = message.get("method")
  if method == "initialize":
    return {
      "capabilities": {"executeCommandProvider": {"commands": COMMANDS}},
      "serverInfo": {"name": "zk fixture", "version": "0.0.0"},
    }
  if method == "shutdown":
    return None
  if method == "workspace/executeCommand":
    return _execute(message.get("params") or {})
  raise LookupError(f"unsupported method {method}")


def main() -> None:
  while True:
    message = _read_message(sys.stdin.buffer)
    if message is None:
      break
    if "method" not in message:
      continue
    if "id" not in message:
      if message["method"] == "exit":
        break
      continue
    try:
      result = _handle(message)
    except ValueError as exc:
      _write_message(
        {
          "jsonrpc": "2.0",
          "id": message["id"],
          "error": {"code": -32602, "message": str(exc)},
        }
      )
      continue
    except LookupError as exc:
      _write_message(
        {
          "jsonrpc": "2.0",
          "id": message["id"],
          "error": {"code": -32601, "message": str(exc)},
        }
      )
      continue
    _write_message({"jsonrpc": "2.0", "id": message["id"], "result": result})


if __name__ == "__main__":
  main()
