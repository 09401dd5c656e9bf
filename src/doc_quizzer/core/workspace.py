"""Workspace bootstrap helpers: where config and logs live."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


WORKSPACE_ENV = "DOC_QUIZZER_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".doc-quizzer-data"

SUBDIRECTORIES = ("config", "logs")


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """The workspace home and its named subdirectories."""

    home: Path
    directories: Mapping[str, Path]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> WorkspaceLayout:
    """Create the workspace directories and return their layout.

    Resolution order is ``path``, then ``DOC_QUIZZER_DATA_HOME``, then
    ``~/.doc-quizzer-data``. Only the implicit default falls back to a
    temporary directory when it cannot be created.
    """

    env_map = os.environ if env is None else env
    base, explicit = _resolve_home(env_map, path)

    candidates = [base]
    if not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "doc-quizzer-data")

    last_error: Exception | None = None
    for home in candidates:
        try:
            return _build_layout(home)
        except PermissionError as exc:
            last_error = exc

    raise WorkspaceError(f"Unable to prepare workspace at {base}") from last_error


def _resolve_home(
    env: Mapping[str, str], override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return override.expanduser().resolve(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().resolve(), True
    return DEFAULT_WORKSPACE.resolve(), False


def _build_layout(home: Path) -> WorkspaceLayout:
    _make_private_dir(home)
    directories = {}
    for name in SUBDIRECTORIES:
        directories[name] = home / name
        _make_private_dir(directories[name])
    return WorkspaceLayout(
        home=home, directories=MappingProxyType(directories)
    )


def _make_private_dir(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise WorkspaceError(
            f"Expected a directory but found a file: {path}"
        )
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
