import types

import pytest

from doc_quizzer import cli
from doc_quizzer.quizzer.config import CONFIG_FILENAME


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "doc-quizzer"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


@pytest.mark.parametrize("flag", ["version", "--version", "-V"])
def test_version_variants(flag, capsys):
    code = cli.main([flag])
    assert code == 0
    assert capsys.readouterr().out.strip() == "0.0-test"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: doc-quizzer" in captured.out
    assert "Available commands:" in captured.out


@pytest.mark.parametrize("argv", [["--help"], ["-h"], ["help"]])
def test_help_shows_usage(argv, capsys):
    code = cli.main(argv)
    assert code == 0
    assert "Usage: doc-quizzer" in capsys.readouterr().out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    out = capsys.readouterr().out
    assert code == 0
    assert "start" in out
    assert "(interactive)" in out
    assert "config" in out


def test_help_known_command(capsys):
    code = cli.main(["help", "start"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Run `doc-quizzer start --help`" in out


@pytest.mark.parametrize("argv", [["help", "nope"], ["bogus"]])
def test_unknown_command_errors(argv, capsys):
    code = cli.main(argv)
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err
    assert "Available commands:" in captured.err


def _fake_module(behaviour):
    def fake_import(module_name: str):
        assert module_name == "doc_quizzer.quizzer.cli"
        return types.SimpleNamespace(start_main=behaviour)

    return fake_import


def test_dispatch_passes_arguments_through(monkeypatch):
    seen = {}

    def stub_main(argv):
        seen["argv"] = argv
        return 7

    monkeypatch.setattr(cli, "import_module", _fake_module(stub_main))
    assert cli.main(["start", "notes.pdf", "--num", "3"]) == 7
    assert seen["argv"] == ["notes.pdf", "--num", "3"]


@pytest.mark.parametrize(
    ("exit_code", "expected"), [(5, 5), (None, 0), ("boom", 1)]
)
def test_dispatch_normalizes_system_exit(monkeypatch, capsys, exit_code, expected):
    def stub_main(argv):
        raise SystemExit(exit_code)

    monkeypatch.setattr(cli, "import_module", _fake_module(stub_main))
    assert cli.main(["start"]) == expected
    if exit_code == "boom":
        assert capsys.readouterr().err.strip() == "boom"


def test_dispatch_normalizes_non_int_return(monkeypatch):
    monkeypatch.setattr(
        cli, "import_module", _fake_module(lambda argv: "done")
    )
    assert cli.main(["start"]) == 0


def test_config_init_end_to_end(tmp_path, capsys):
    code = cli.main(["config", "init", "--workspace", str(tmp_path / "ws")])

    assert code == 0
    target = (tmp_path / "ws").resolve() / "config" / CONFIG_FILENAME
    assert target.exists()
    assert str(target) in capsys.readouterr().out


def test_start_argument_errors_become_exit_codes(capsys):
    code = cli.main(["start", "--num", "-1"])

    assert code == 2
    assert "--num must be a positive integer" in capsys.readouterr().err
