from __future__ import annotations

import os
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

import anyio
from lsprotocol import types as lsp
from pygls.exceptions import JsonRpcException
from pygls.lsp.client import LanguageClient

from zk_query.config.models import ServerConfig

from .errors import NoSessionError, RemoteCommandError

CLIENT_NAME = "zk-query"
CLIENT_VERSION = "0.1.0"
NOTEBOOK_MARKER = ".zk"
SHUTDOWN_GRACE_SECONDS = 2.0


def find_notebook_root(path: Path | str) -> Optional[Path]:
  """Walk upward from `path` to the first directory holding a `.zk` directory."""
  current = Path(path).expanduser().absolute()
  start = current if current.is_dir() else current.parent
  for candidate in (start, *start.parents):
    if (candidate / NOTEBOOK_MARKER).is_dir():
      return candidate
  return None


def is_notebook_document(path: Path | str | None) -> bool:
  if not path:
    return False
  return find_notebook_root(path) is not None


class NoteSession(Protocol):
  def execute_command(self, command: str, arguments: List[Any]) -> Any:
    ...


class ZkLspSession:
  """
  Session with a `zk lsp` server rooted at a notebook.

  Each command runs over a fresh stdio connection: start, initialize,
  `workspace/executeCommand`, shutdown.
  """

  def __init__(self, root: Path, server: Optional[ServerConfig] = None):
    self._root = root
    self._server = server or ServerConfig()

  @property
  def root(self) -> Path:
    return self._root

  def execute_command(self, command: str, arguments: List[Any]) -> Any:
    return anyio.run(self._execute_command_async, command, list(arguments))

  async def _execute_command_async(self, command: str, arguments: List[Any]) -> Any:
    try:
      with anyio.fail_after(self._server.timeout):
        async with self._connect(command) as client:
          return await client.workspace_execute_command_async(
            lsp.ExecuteCommandParams(command=command, arguments=arguments)
          )
    except JsonRpcException as exc:
      message = getattr(exc, "message", None) or str(exc)
      raise RemoteCommandError(command, message, getattr(exc, "code", None)) from exc
    except TimeoutError as exc:
      raise RemoteCommandError(
        command, f"No response from zk server within {self._server.timeout}s"
      ) from exc

  @asynccontextmanager
  async def _connect(self, command: str):
    client = LanguageClient(CLIENT_NAME, CLIENT_VERSION)
    executable, *args = self._server.command
    try:
      await client.start_io(executable, *args, cwd=str(self._root))
    except OSError as exc:
      raise RemoteCommandError(command, f"Failed to start zk server: {exc}") from exc
    try:
      await client.initialize_async(self._initialize_params())
      client.initialized(lsp.InitializedParams())
      yield client
    finally:
      await self._shutdown(client)
      await client.stop()

  async def _shutdown(self, client: LanguageClient) -> None:
    # The server must receive `exit` even after a failed request, or stop() waits on it.
    with anyio.move_on_after(SHUTDOWN_GRACE_SECONDS, shield=True):
      with suppress(JsonRpcException, OSError, RuntimeError):
        await client.shutdown_async(None)
      with suppress(OSError, RuntimeError):
        client.exit(None)

  def _initialize_params(self) -> lsp.InitializeParams:
    root_uri = self._root.as_uri()
    return lsp.InitializeParams(
      capabilities=lsp.ClientCapabilities(),
      process_id=os.getpid(),
      client_info=lsp.ClientInfo(name=CLIENT_NAME, version=CLIENT_VERSION),
      root_uri=root_uri,
      workspace_folders=[lsp.WorkspaceFolder(uri=root_uri, name=self._root.name)],
    )


class SessionRegistry:
  """Tracks the server session of each notebook, keyed by notebook root."""

  def __init__(
    self,
    server: Optional[ServerConfig] = None,
    session_factory: Optional[Callable[[Path], NoteSession]] = None,
  ):
    self._server = server
    self._sessions: Dict[Path, NoteSession] = {}
    self._session_factory = session_factory or (lambda root: ZkLspSession(root, server))

  def register(self, root: Path | str, session: NoteSession) -> None:
    self._sessions[Path(root).expanduser().absolute()] = session

  def unregister(self, root: Path | str) -> Optional[NoteSession]:
    return self._sessions.pop(Path(root).expanduser().absolute(), None)

  def session_for(self, document_path: Path | str) -> NoteSession:
    root = find_notebook_root(document_path)
    if root is None:
      raise NoSessionError(f"{document_path} is not inside a zk notebook")
    session = self._sessions.get(root)
    if session is None and self._server is not None and self._server.auto_start:
      session = self._session_factory(root)
      self._sessions[root] = session
    if session is None:
      raise NoSessionError(f"No zk server session for notebook {root}")
    return session
