from __future__ import annotations

import pytest

from doc_quizzer.core import workspace


def test_ensure_workspace_creates_private_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert set(layout.directories) == {"config", "logs"}
    for path in (layout.home, *layout.directories.values()):
        assert path.is_dir()
        assert path.stat().st_mode & 0o777 == 0o700


def test_ensure_workspace_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "existing"))

    first = workspace.ensure_workspace()
    (first.path_for("config") / "keep.toml").write_text("", encoding="utf-8")
    second = workspace.ensure_workspace()

    assert first == second
    assert (second.path_for("config") / "keep.toml").exists()


def test_explicit_path_wins_over_environment(tmp_path):
    custom = tmp_path / "custom-root"

    layout = workspace.ensure_workspace(
        env={workspace.WORKSPACE_ENV: str(tmp_path / "ignored")}, path=custom
    )

    assert layout.home == custom.resolve()
    assert not (tmp_path / "ignored").exists()


def test_default_home_falls_back_to_temp_dir(tmp_path, monkeypatch):
    locked = tmp_path / "locked-home"
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", locked)
    monkeypatch.setattr(workspace.tempfile, "gettempdir", lambda: str(tmp_path))
    original = workspace._make_private_dir

    def _deny(path):
        if path == locked.resolve():
            raise PermissionError("denied")
        original(path)

    monkeypatch.setattr(workspace, "_make_private_dir", _deny)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == tmp_path / "doc-quizzer-data"
    assert layout.path_for("logs").is_dir()


def test_explicit_path_does_not_fall_back(tmp_path, monkeypatch):
    def _deny(path):
        raise PermissionError("denied")

    monkeypatch.setattr(workspace, "_make_private_dir", _deny)

    with pytest.raises(workspace.WorkspaceError, match="Unable to prepare"):
        workspace.ensure_workspace(path=tmp_path / "ws")


def test_file_in_place_of_workspace_raises(tmp_path):
    target = tmp_path / "occupied"
    target.write_text("not a dir", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=target)


def test_unknown_directory_key(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "ws")

    with pytest.raises(KeyError):
        layout.path_for("cache")
