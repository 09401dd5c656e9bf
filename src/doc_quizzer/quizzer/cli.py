"""CLI entry points for starting quizzes and managing configuration."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console

from doc_quizzer.core import workspace as workspace_mod
from doc_quizzer.core.logging import configure_logger
from doc_quizzer.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    QuizzerConfig,
    QuizzerConfigError,
    load_config,
    write_config_template,
)
from .controller import WorkflowController
from .extract import SUPPORTED_EXTENSIONS
from .producer import OpenAIQuizProducer, QuizProducer
from .session import InputProvider, run_console_session

LOGGER_NAME = "doc_quizzer"


def _build_start_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doc-quizzer start",
        description=(
            "Generate a multiple-choice quiz from a PDF or Word document "
            "and take it in the terminal."
        ),
        epilog=(
            "Run `doc-quizzer config init` to scaffold the default "
            f"{CONFIG_FILENAME} template."
        ),
    )
    parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        help=(
            "Document to quiz on ({0}). Prompted for when omitted.".format(
                ", ".join(sorted(SUPPORTED_EXTENSIONS))
            )
        ),
    )
    parser.add_argument(
        "--num",
        type=int,
        help="Number of questions to generate.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        help="Seconds allowed per question.",
    )
    parser.add_argument("--model", help="OpenAI model used for generation.")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (defaults to the workspace config).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root used for config and logs.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr.",
    )
    return parser


def start_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_start_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    for name in ("num", "duration"):
        value = getattr(args, name)
        if value is not None and value <= 0:
            parser.error(f"--{name} must be a positive integer.")

    overrides = ConfigOverrides(
        num_questions=args.num,
        timer_seconds=args.duration,
        model=args.model,
        log_level=args.log_level,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizzerConfigError as exc:
        parser.error(str(exc))

    config = load_result.config
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "start command invoked",
        extra={
            "config_path": load_result.config_path,
            "model": config.model,
        },
    )

    controller = WorkflowController(
        _build_producer(config),
        min_text_length=config.min_text_length,
        logger=logger.getChild("controller"),
    )
    console = _build_console()
    outcome = run_console_session(
        controller,
        console,
        _build_input_provider(console),
        path=args.file,
        num_questions=config.num_questions,
        duration_seconds=config.timer_seconds,
    )
    logger.info(
        "Session ended",
        extra={"exit_action": outcome.exit_action, "attempts": outcome.attempts},
    )
    console.print(f"Log file: {log_path}", style="dim")
    return 0


def _build_producer(config: QuizzerConfig) -> QuizProducer:
    return OpenAIQuizProducer(
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


def _build_console() -> Console:
    return Console()


def _build_input_provider(console: Console) -> InputProvider:
    return lambda: console.input("[bold cyan]> [/]")


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.command == "init":
        return _handle_config_init(args)
    return _handle_config_show(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doc-quizzer config",
        description="Manage the doc-quizzer configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help=f"Write the default {CONFIG_FILENAME} template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used when resolving the default config path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )

    show_parser = subparsers.add_parser(
        "show", help="Print the resolved configuration."
    )
    show_parser.add_argument("--config", type=Path)
    show_parser.add_argument("--workspace", type=Path)
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = write_config_template(target, overwrite=args.force)
    except QuizzerConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote doc-quizzer config to {written}\n")
    return 0


def _handle_config_show(args: argparse.Namespace) -> int:
    try:
        result = load_config(
            config_path=args.config, workspace_path=args.workspace
        )
    except QuizzerConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    source = result.config_path or "(defaults)"
    lines = [f"config file: {source}"]
    for key, value in vars(result.config).items():
        lines.append(f"  {key}: {value}")
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


__all__ = ["config_main", "start_main"]
