import json
import logging
from unittest.mock import patch

import pytest

from simone_prompts.models import EnvConfig
from simone_prompts.simone_prompts import (
    build_parser,
    main,
    setup_logging,
    simone_prompts,
)

GREETING_PROMPT = """
name: greeting
description: Say hello
arguments:
  - name: who
    description: Person to greet
    required: true
  - name: mood
    default: cheerful
template: |
  Hello {{ who }}, feeling {{ mood }}!
"""


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logging.getLogger("simone_prompts").handlers.clear()


@pytest.fixture
def cli(project_dir, builtin_dir, builtin_prompt):
    builtin_prompt("greeting", GREETING_PROMPT)

    def _run(*argv):
        return simone_prompts(
            [
                "--project-path",
                str(project_dir),
                "--builtin-templates",
                str(builtin_dir),
                *argv,
            ]
        )

    return _run


class TestListCommand:

    def test_text_listing(self, cli, capsys):
        assert cli("list") == 0

        lines = capsys.readouterr().out.splitlines()

        assert lines[0] == "greeting: Say hello"
        assert lines[1] == "    who (required) Person to greet"
        assert lines[2].startswith("    mood (optional)")

    def test_json_listing(self, cli, capsys):
        assert cli("--json", "list") == 0

        listing = json.loads(capsys.readouterr().out)

        assert [prompt["name"] for prompt in listing] == ["greeting"]
        assert "template" not in listing[0]
        assert listing[0]["arguments"][1]["default"] == "cheerful"


class TestRenderCommand:

    def test_render_text(self, cli, capsys):
        assert cli("render", "greeting", "-a", "who=Ann") == 0
        assert capsys.readouterr().out == "Hello Ann, feeling cheerful!\n\n"

    def test_repeated_arguments(self, cli, capsys):
        code = cli("render", "greeting", "-a", "who=Ann", "--arg", "mood=a=b")
        assert code == 0
        assert "Hello Ann, feeling a=b!" in capsys.readouterr().out

    def test_render_json(self, cli, capsys):
        assert cli("--json", "render", "greeting", "-a", "who=Bo") == 0

        messages = json.loads(capsys.readouterr().out)

        assert messages == [
            {
                "role": "user",
                "content": {"type": "text", "text": "Hello Bo, feeling cheerful!\n"},
            }
        ]

    def test_missing_prompt_is_not_a_failure(self, cli, capsys):
        assert cli("render", "ghost") == 0
        assert "Prompt 'ghost' not found" in capsys.readouterr().out

    def test_malformed_argument(self, cli, capsys):
        assert cli("render", "greeting", "-a", "who") == 1
        assert "key=value" in capsys.readouterr().err

    def test_defective_template(self, cli, capsys, project_prompt):
        project_prompt("bad", 'name: bad\ntemplate: "{{ missing.attribute }}"\n')

        assert cli("render", "bad") == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "prompt template is invalid" in captured.err


class TestProjectPath:

    def test_taken_from_environment(self, project_dir, monkeypatch, capsys):
        monkeypatch.setenv("PROJECT_PATH", str(project_dir))
        monkeypatch.delenv("SIMONE_BUILTIN_TEMPLATES", raising=False)

        assert simone_prompts(["render", "review_changes"]) == 0
        assert "Review the working tree of demo." in capsys.readouterr().out

    def test_required(self, monkeypatch, capsys):
        monkeypatch.delenv("PROJECT_PATH", raising=False)

        assert simone_prompts(["list"]) == 1
        assert "PROJECT_PATH" in capsys.readouterr().err


class TestEnvironmentDefaults:

    def test_parser_defaults_come_from_env_config(self):
        env = EnvConfig(
            project_path="/srv/shop",
            debug=True,
            log_file="/tmp/simone.log",
            builtin_templates="/opt/prompts",
        )

        args = build_parser(env).parse_args(["list"])

        assert args.project_path == "/srv/shop"
        assert args.debug is True
        assert args.log_file == "/tmp/simone.log"
        assert args.builtin_templates == "/opt/prompts"

    def test_flags_override_environment(self):
        env = EnvConfig(project_path="/srv/shop", builtin_templates="/opt/prompts")

        args = build_parser(env).parse_args(
            ["--project-path", "/work/site", "--builtin-templates", "/x", "list"]
        )

        assert args.project_path == "/work/site"
        assert args.builtin_templates == "/x"

    def test_builtin_templates_from_environment(
        self, project_dir, builtin_dir, builtin_prompt, monkeypatch, capsys
    ):
        builtin_prompt("greeting", GREETING_PROMPT)
        monkeypatch.setenv("PROJECT_PATH", str(project_dir))
        monkeypatch.setenv("SIMONE_BUILTIN_TEMPLATES", str(builtin_dir))
        monkeypatch.delenv("SIMONE_LOG_FILE", raising=False)

        assert simone_prompts(["list"]) == 0
        assert capsys.readouterr().out.splitlines()[0] == "greeting: Say hello"

    def test_debug_from_environment(self, project_dir, monkeypatch):
        monkeypatch.setenv("SIMONE_DEBUG", "true")
        monkeypatch.delenv("SIMONE_LOG_FILE", raising=False)

        assert simone_prompts(["--project-path", str(project_dir), "list"]) == 0
        handler = logging.getLogger("simone_prompts").handlers[0]
        assert handler.level == logging.DEBUG


class TestEntryPoint:

    def test_main_exits_with_status(self, project_dir):
        argv = ["simone-prompts", "--project-path", str(project_dir), "list"]
        with patch("sys.argv", argv):
            with pytest.raises(SystemExit) as exit_info:
                main()
        assert exit_info.value.code == 0

    def test_command_is_required(self, capsys):
        with pytest.raises(SystemExit) as exit_info:
            simone_prompts([])
        assert exit_info.value.code == 2


class TestSetupLogging:

    def test_stderr_handler(self):
        logger = setup_logging()

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert logger.handlers[0].level == logging.INFO

    def test_debug_level(self):
        logger = setup_logging(debug=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "simone.log"

        logger = setup_logging(log_file=str(log_file))
        logger.error("boom")

        handler = logger.handlers[0]
        assert isinstance(handler, logging.FileHandler)
        assert handler.level == logging.ERROR
        handler.flush()
        assert "simone_prompts - ERROR - boom" in log_file.read_text()
        handler.close()

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1
