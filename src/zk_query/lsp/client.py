from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Union

from .errors import NotBoundError
from .session import SessionRegistry
from .types import CreationArgs, ListOptions

ZK_INDEX = "zk.index"
ZK_LIST = "zk.list"
ZK_TAG_LIST = "zk.tag.list"
ZK_NEW = "zk.new"
ZK_LINK = "zk.link"

CommandArgs = Union[CreationArgs, ListOptions, dict, None]


class CommandInvoker:
  """
  Runs zk commands against the session of the notebook holding a document.

  Remote failures are not handled here; callers decide how to degrade.
  """

  def __init__(self, sessions: SessionRegistry):
    self._sessions = sessions

  def invoke(
    self,
    command: str,
    args: CommandArgs,
    document_path: Optional[Path | str],
  ) -> Any:
    if not document_path:
      raise NotBoundError("The current document is not backed by a file")
    path = str(document_path)
    session = self._sessions.session_for(path)
    arguments: List[Any] = [path]
    if args is not None:
      arguments.append(self._serialize_args(args))
    return session.execute_command(command, arguments)

  def _serialize_args(self, args: CommandArgs) -> Any:
    if isinstance(args, (CreationArgs, ListOptions)):
      return args.to_command_args()
    return args
