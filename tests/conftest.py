from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import pytest

from zk_query.lsp.client import CommandInvoker
from zk_query.lsp.session import SessionRegistry


class FakeSession:
  """Records executed commands and answers from canned responses."""

  def __init__(self, responses: Dict[str, Any] | None = None) -> None:
    self.responses: Dict[str, Any] = dict(responses or {})
    self.calls: List[Tuple[str, List[Any]]] = []

  def execute_command(self, command: str, arguments: List[Any]) -> Any:
    self.calls.append((command, list(arguments)))
    response = self.responses.get(command)
    if isinstance(response, Exception):
      raise response
    if callable(response):
      return response(arguments)
    return response

  def commands(self) -> List[str]:
    return [command for command, _ in self.calls]


@pytest.fixture
def notebook(tmp_path: Path) -> Path:
  root = tmp_path / "notebook"
  (root / ".zk").mkdir(parents=True)
  (root / "journal" / "daily").mkdir(parents=True)
  document = root / "index.md"
  document.write_text("# Index\n", encoding="utf-8")
  return root


@pytest.fixture
def document(notebook: Path) -> Path:
  return notebook / "index.md"


@pytest.fixture
def session() -> FakeSession:
  return FakeSession()


@pytest.fixture
def invoker(notebook: Path, session: FakeSession) -> CommandInvoker:
  registry = SessionRegistry()
  registry.register(notebook, session)
  return CommandInvoker(registry)


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
  return FakeSession
