from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.traceback import install as install_rich_traceback

from zk_query.cli.prompts import pick_candidate, select_tags, show_candidates, show_tags
from zk_query.config.loader import load_config
from zk_query.config.models import AppConfig
from zk_query.lsp.client import CommandInvoker
from zk_query.lsp.errors import ZkQueryError
from zk_query.lsp.session import SessionRegistry, is_notebook_document
from zk_query.lsp.types import Candidate
from zk_query.notes.creation import NoteCreator, shortcuts_from_config
from zk_query.notes.finder import NoteFinder
from zk_query.notes.links import LinkInserter

console = Console()
install_rich_traceback(show_locals=False)


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="zkq",
    description="Query and create notes through a zk notebook's language server.",
  )

  parser.add_argument(
    "-c",
    "--config",
    help="Path to config.yaml",
  )
  parser.add_argument(
    "-d",
    "--document",
    default=".",
    help="Document or directory inside the notebook (defaults to the current directory)",
  )

  subparsers = parser.add_subparsers(dest="command", required=True)

  notes_p = subparsers.add_parser("notes", help="Search notes by text and tags")
  notes_p.add_argument("query", nargs="?", default="", help="Full-text query")
  notes_p.add_argument(
    "-t",
    "--tags",
    action="store_true",
    help="Pick tags to filter by before searching",
  )
  notes_p.add_argument(
    "--pick",
    action="store_true",
    help="Select one of the matching notes and print its path",
  )

  recent_p = subparsers.add_parser("recent", help="List recently modified notes")
  recent_p.add_argument("-n", "--limit", type=_positive_int, help="Maximum number of notes")
  recent_p.add_argument("--pick", action="store_true", help="Select a note and print its path")

  subparsers.add_parser("tags", help="List tags by note count")

  new_p = subparsers.add_parser("new", help="Create a note")
  new_p.add_argument("--title", help="Title of the new note")
  new_p.add_argument("--dir", help="Notebook directory to create the note in")
  new_p.add_argument("--template", help="Template file to render the note with")
  new_p.add_argument(
    "-o",
    "--option",
    action="append",
    default=[],
    metavar="KEY=VALUE",
    help="Additional zk.new option (repeatable)",
  )

  shortcut_p = subparsers.add_parser("shortcut", help="Run a configured note shortcut")
  shortcut_p.add_argument("name", nargs="?", help="Shortcut name (omit to list shortcuts)")
  shortcut_p.add_argument("title", nargs="?", help="Title, for shortcuts without a preset one")

  link_p = subparsers.add_parser("link", help="Insert a link to a note into a file")
  link_p.add_argument("file", help="Markdown file to insert the link into")
  link_p.add_argument("--line", type=int, required=True, help="Line number (1-based)")
  link_p.add_argument("--column", type=int, default=1, help="Column number (1-based)")

  subparsers.add_parser("index", help="Re-index the notebook")

  return parser


def open_note(path: str) -> None:
  console.print(escape(path), highlight=False)


def _positive_int(value: str) -> int:
  try:
    number = int(value)
  except ValueError:
    raise argparse.ArgumentTypeError(f"Expected a positive integer, got {value!r}") from None
  if number < 1:
    raise argparse.ArgumentTypeError(f"Expected a positive integer, got {value!r}")
  return number


def _option_pairs(options: List[str]) -> List[str]:
  flat: List[str] = []
  for option in options:
    key, sep, value = option.partition("=")
    if not sep:
      raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {option!r}")
    flat.extend([key.strip(), value])
  return flat


def _run_notes(args: argparse.Namespace, finder: NoteFinder, document: Path) -> int:
  result = finder.search(
    document,
    args.query,
    use_tag_filter=args.tags,
    tag_selector=select_tags,
  )
  return _present(result.candidates, result.description, args.pick)


def _run_recent(
  args: argparse.Namespace, config: AppConfig, finder: NoteFinder, document: Path
) -> int:
  result = finder.recent(
    document, args.limit if args.limit is not None else config.recent_limit
  )
  return _present(result.candidates, result.description, args.pick)


def _present(candidates: List[Candidate], description: str, pick: bool) -> int:
  if not candidates:
    return 0
  if not pick:
    show_candidates(candidates, description)
    return 0
  choice = pick_candidate(candidates)
  if choice is not None:
    open_note(choice.path)
  return 0


def _run_new(args: argparse.Namespace, creator: NoteCreator, document: Path) -> int:
  flat: List[Any] = []
  for key in ("title", "dir", "template"):
    value = getattr(args, key)
    if value:
      flat.extend([key, value])
  try:
    flat.extend(_option_pairs(args.option))
  except argparse.ArgumentTypeError as exc:
    console.print(f"[red]{escape(str(exc))}[/red]")
    return 2
  path = creator.create(document, flat)
  if path is None:
    return 1
  open_note(path)
  return 0


def _run_shortcut(
  args: argparse.Namespace, config: AppConfig, creator: NoteCreator, document: Path
) -> int:
  shortcuts = shortcuts_from_config(
    config,
    creator=creator,
    opener=open_note,
    current_document=lambda: document,
  )
  if not args.name:
    for name, shortcut in shortcuts.items():
      console.print(f"[bold]{escape(name)}[/bold] {escape(shortcut.description or '')}")
    return 0
  shortcut = shortcuts.get(args.name)
  if shortcut is None:
    console.print(f"[red]Unknown shortcut:[/red] {escape(args.name)}")
    return 1
  if shortcut.arity == 0:
    if args.title:
      console.print(f"[yellow]Shortcut '{escape(args.name)}' has a preset title; ignoring.[/yellow]")
    shortcut()
    return 0
  title = args.title or Prompt.ask("Title", console=console)
  shortcut(title)
  return 0


def _run_link(args: argparse.Namespace, inserter: LinkInserter) -> int:
  target = Path(args.file)
  document = target if target.is_file() else None
  linked = inserter.insert(document, max(args.line - 1, 0), max(args.column - 1, 0), pick_candidate)
  if linked:
    console.print(f"[green]Linked[/green] {escape(linked)}")
  return 0


def _run_index(finder: NoteFinder, document: Path) -> int:
  result = finder.index(document)
  console.print("[green]Notebook indexed.[/green]")
  if result:
    console.print(escape(json.dumps(result, indent=2, default=str)), highlight=False)
  return 0


def main(argv: list[str] | None = None) -> int:
  if argv is None:
    argv = sys.argv[1:]

  parser = build_parser()
  args = parser.parse_args(argv)

  cfg_path = Path(args.config) if args.config else None
  if cfg_path is not None and not cfg_path.exists():
    console.print(f"[red]Config not found:[/red] {cfg_path}")
    return 1
  config = load_config(cfg_path)

  document = Path(args.file if args.command == "link" else args.document)
  if not is_notebook_document(document):
    console.print(f"[red]Not inside a zk notebook:[/red] {escape(str(document))}")
    return 1

  invoker = CommandInvoker(SessionRegistry(config.server))
  finder = NoteFinder(invoker, config.display)
  creator = NoteCreator(invoker)

  try:
    if args.command == "notes":
      return _run_notes(args, finder, document)
    if args.command == "recent":
      return _run_recent(args, config, finder, document)
    if args.command == "tags":
      show_tags(finder.list_tags(document))
      return 0
    if args.command == "new":
      return _run_new(args, creator, document)
    if args.command == "shortcut":
      return _run_shortcut(args, config, creator, document)
    if args.command == "link":
      return _run_link(args, LinkInserter(invoker))
    if args.command == "index":
      return _run_index(finder, document)
  except ZkQueryError as exc:
    console.print(f"[red]{escape(str(exc))}[/red]")
    return 1
  except (EOFError, KeyboardInterrupt):
    console.print("\n[dim]Aborted.[/dim]")
    return 1

  parser.print_help()
  return 1


if __name__ == "__main__":
  raise SystemExit(main())
