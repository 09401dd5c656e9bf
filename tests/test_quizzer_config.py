from __future__ import annotations

import pytest

from doc_quizzer.quizzer import config as quizzer_config
from doc_quizzer.quizzer.config import (
    ConfigOverrides,
    QuizzerConfigError,
    load_config,
    write_config_template,
)


def test_defaults_without_config_file(workspace):
    result = load_config(workspace_path=workspace.root, env={})

    cfg = result.config
    assert result.config_path is None
    assert (cfg.num_questions, cfg.timer_seconds, cfg.min_text_length) == (
        5,
        30,
        100,
    )
    assert cfg.model == "gpt-4o-mini"
    assert cfg.temperature == 0.2
    assert cfg.max_tokens == 4000
    assert cfg.log_level == "INFO"
    assert result.layout.home == workspace.root.resolve()


def test_workspace_config_file_is_loaded(workspace):
    workspace.write_config(
        """
        [quiz]
        num_questions = 8
        min_text_length = 250

        [ai]
        model = "gpt-4o"
        temperature = 0

        [logging]
        level = "debug"
        """
    )

    result = load_config(workspace_path=workspace.root, env={})

    assert result.config_path == workspace.config_path.resolve()
    assert result.config.num_questions == 8
    assert result.config.timer_seconds == 30
    assert result.config.min_text_length == 250
    assert result.config.model == "gpt-4o"
    assert result.config.temperature == 0.0
    assert result.config.log_level == "DEBUG"


def test_cli_beats_env_beats_file(workspace):
    workspace.write_config("[quiz]\nnum_questions = 7\ntimer_seconds = 20")
    env = {
        "DOC_QUIZZER_NUM_QUESTIONS": "8",
        "DOC_QUIZZER_TIMER_SECONDS": "40",
        "DOC_QUIZZER_MODEL": "env-model",
    }

    result = load_config(
        workspace_path=workspace.root,
        env=env,
        overrides=ConfigOverrides(num_questions=9, log_level="warning"),
    )

    assert result.config.num_questions == 9
    assert result.config.timer_seconds == 40
    assert result.config.model == "env-model"
    assert result.config.log_level == "WARNING"


def test_explicit_config_path(tmp_path, workspace):
    custom = tmp_path / "elsewhere.toml"
    custom.write_text("[quiz]\ntimer_seconds = 12\n", encoding="utf-8")

    result = load_config(
        config_path=custom, workspace_path=workspace.root, env={}
    )

    assert result.config.timer_seconds == 12
    assert result.config_path == custom


def test_config_path_from_environment(tmp_path, workspace):
    custom = tmp_path / "env.toml"
    custom.write_text("[quiz]\nnum_questions = 3\n", encoding="utf-8")

    result = load_config(
        workspace_path=workspace.root,
        env={quizzer_config.CONFIG_ENV: str(custom)},
    )

    assert result.config.num_questions == 3


@pytest.mark.parametrize("use_env", [False, True])
def test_missing_requested_config_is_an_error(tmp_path, workspace, use_env):
    missing = tmp_path / "missing.toml"
    kwargs = (
        {"env": {quizzer_config.CONFIG_ENV: str(missing)}}
        if use_env
        else {"env": {}, "config_path": missing}
    )

    with pytest.raises(QuizzerConfigError, match="Config file not found"):
        load_config(workspace_path=workspace.root, **kwargs)


@pytest.mark.parametrize(
    ("body", "fragment"),
    [
        ("[quiz]\nnum_questions = 0", "quiz.num_questions"),
        ("[quiz]\nmin_text_length = 50", "min_text_length must be at least 100"),
        ("[extra]\nflag = 1", "Unknown configuration key 'extra'"),
        ("[quiz]\ntimer_seconds = true", "quiz.timer_seconds"),
        ("[quiz]\nbogus = 1", "Unknown configuration key 'quiz.bogus'"),
        ("[ai]\ntemperature = 2.5", "between 0 and 2"),
        ("[ai]\nmodel = \"  \"", "ai.model"),
        ("quiz = 3", "Expected table"),
        ("[quiz", "Failed to parse"),
    ],
)
def test_invalid_file_values(workspace, body, fragment):
    workspace.write_config(body)

    with pytest.raises(QuizzerConfigError) as exc:
        load_config(workspace_path=workspace.root, env={})

    assert fragment in str(exc.value)


def test_non_integer_environment_value(workspace):
    with pytest.raises(QuizzerConfigError, match="DOC_QUIZZER_NUM_QUESTIONS"):
        load_config(
            workspace_path=workspace.root,
            env={"DOC_QUIZZER_NUM_QUESTIONS": "many"},
        )


def test_default_template_matches_defaults(tmp_path, workspace):
    template = tmp_path / "template.toml"
    template.write_text(quizzer_config.DEFAULT_TEMPLATE, encoding="utf-8")

    from_template = load_config(
        config_path=template, workspace_path=workspace.root, env={}
    ).config
    defaults = load_config(workspace_path=workspace.root, env={}).config

    assert from_template == defaults


def test_write_config_template_refuses_overwrite(tmp_path):
    target = tmp_path / "nested" / "doc_quizzer.toml"

    written = write_config_template(target)
    assert written.read_text(encoding="utf-8") == quizzer_config.DEFAULT_TEMPLATE
    assert written.stat().st_mode & 0o777 == 0o600

    target.write_text("# edited\n", encoding="utf-8")
    with pytest.raises(QuizzerConfigError, match="already exists"):
        write_config_template(target)
    assert target.read_text(encoding="utf-8") == "# edited\n"

    write_config_template(target, overwrite=True)
    assert target.read_text(encoding="utf-8") == quizzer_config.DEFAULT_TEMPLATE
