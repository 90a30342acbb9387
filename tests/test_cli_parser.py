import argparse
from pathlib import Path

import pytest

from zk_query.cli import main as cli_main
from zk_query.cli.main import build_parser, main
from zk_query.cli.prompts import parse_candidate_choice, parse_tag_selection
from zk_query.lsp.client import ZK_LIST, ZK_NEW
from zk_query.lsp.types import Candidate


def _get_subparser_choices(parser: argparse.ArgumentParser) -> set[str]:
  """Helper to inspect configured subparsers in a stable way."""
  if not parser._subparsers:
    return set()
  # _subparsers stores a list with a single _SubParsersAction containing choices
  return set(parser._subparsers._group_actions[0].choices.keys())


def test_build_parser_registers_expected_subcommands():
  parser = build_parser()
  choices = _get_subparser_choices(parser)
  assert {"notes", "recent", "tags", "new", "shortcut", "link", "index"} <= choices


def test_main_reports_missing_config(capsys, tmp_path: Path):
  cfg_path = tmp_path / "missing.yaml"
  result = main(["-c", str(cfg_path), "notes"])
  assert result == 1
  out = capsys.readouterr().out
  assert "Config not found" in out


def test_main_refuses_documents_outside_notebooks(capsys, tmp_path: Path):
  result = main(["-d", str(tmp_path), "index"])
  assert result == 1
  assert "Not inside a zk notebook" in capsys.readouterr().out


@pytest.fixture
def patched_registry(monkeypatch, notebook, session):
  class _Registry:
    def __init__(self, server=None):
      pass

    def session_for(self, document_path):
      return session

  monkeypatch.setattr(cli_main, "SessionRegistry", _Registry)
  return session


def test_main_notes_lists_candidates(capsys, notebook, patched_registry):
  patched_registry.responses[ZK_LIST] = [{"title": "Alpha", "path": "alpha.md"}]

  result = main(["-d", str(notebook), "notes", "alp"])

  assert result == 0
  assert "Alpha" in capsys.readouterr().out
  assert patched_registry.calls[0][1][1]["match"] == ["alp"]


def test_main_new_prints_created_path(capsys, notebook, patched_registry):
  patched_registry.responses[ZK_NEW] = {"path": "inbox/idea.md"}

  result = main(["-d", str(notebook), "new", "--title", "Idea", "--dir", "inbox", "-o", "group=journal"])

  assert result == 0
  assert "inbox/idea.md" in capsys.readouterr().out
  assert patched_registry.calls[0][1][1] == {"title": "Idea", "dir": "inbox", "group": "journal"}


def test_main_new_rejects_malformed_option(capsys, notebook, patched_registry):
  result = main(["-d", str(notebook), "new", "-o", "bad key=1"])

  assert result == 1
  assert patched_registry.calls == []


def test_main_shortcut_prompts_for_missing_title(monkeypatch, capsys, tmp_path, notebook, patched_registry):
  cfg_path = tmp_path / "config.yaml"
  cfg_path.write_text(
    "shortcuts:\n  - name: daily\n    args:\n      dir: journal/daily\n",
    encoding="utf-8",
  )
  patched_registry.responses[ZK_NEW] = {"path": "journal/daily/monday.md"}
  monkeypatch.setattr(cli_main.Prompt, "ask", staticmethod(lambda *args, **kwargs: "Monday"))

  result = main(["-c", str(cfg_path), "-d", str(notebook), "shortcut", "daily"])

  assert result == 0
  assert patched_registry.calls[0][1][1] == {"title": "Monday", "dir": "journal/daily"}
  assert "journal/daily/monday.md" in capsys.readouterr().out


def test_parse_tag_selection_accepts_names_and_numbers():
  vocabulary = ["work", "books", "todo"]

  assert parse_tag_selection("2, todo, 2, misc", vocabulary) == ["books", "todo", "misc"]
  assert parse_tag_selection("", vocabulary) == []


def test_parse_candidate_choice():
  candidates = [Candidate(display="A", path="a.md"), Candidate(display="B", path="b.md")]

  assert parse_candidate_choice("2", candidates).path == "b.md"
  assert parse_candidate_choice("3", candidates) is None
  assert parse_candidate_choice("", candidates) is None


@pytest.mark.parametrize("limit", ["-1", "0", "many"])
def test_recent_rejects_non_positive_limit(limit, capsys):
  with pytest.raises(SystemExit) as excinfo:
    build_parser().parse_args(["recent", "-n", limit])
  assert excinfo.value.code == 2
  assert "positive integer" in capsys.readouterr().err


def test_recent_accepts_positive_limit():
  args = build_parser().parse_args(["recent", "-n", "3"])
  assert args.limit == 3
