"""
ai-dev-workflow - in-process CLI scenarios

File: tests/integration/test_cli_workflows.py

Purpose
- Drive ``cli_entrypoint`` end to end against a temporary project root with
  scripted prompt answers and a fake test runner.

What this test file should cover
- init -> status -> context clear -> three commands -> context show.
- config sync overwrite (with and without confirmation), merge and restore.
- workflow list/show/follow/compose.
- Exit codes and single-line ``error:`` messages for expected failures.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import pytest

from ai_dev_workflow.context import ContextStore, EntryStatus
from ai_dev_workflow.main import ExitCode, cli_entrypoint
from ai_dev_workflow.persistence import load_yaml_file, save_yaml_file


class ScriptedPrompter:
    def __init__(self, answers: Sequence[str] = (), confirms: Sequence[bool] = ()) -> None:
        self._answers = list(answers)
        self._confirms = list(confirms)

    def ask(self, message: str, default: str = "") -> str:
        return self._answers.pop(0) if self._answers else default

    def confirm(self, message: str, *, default: bool = True) -> bool:
        return self._confirms.pop(0) if self._confirms else default

    def choose(self, message: str, choices: Sequence[str], *, default: str | None = None) -> str:
        if self._answers:
            return self._answers.pop(0)
        assert default is not None
        return default


class FakeCommandRunner:
    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.command_lines: list[str] = []

    def run(self, command_line: str, *, cwd: Path) -> int:
        self.command_lines.append(command_line)
        return self.exit_code


def _run(
    root: Path,
    *argv: str,
    prompter: ScriptedPrompter | None = None,
    runner: FakeCommandRunner | None = None,
) -> int:
    return cli_entrypoint(
        [*argv, "--project-root", str(root)],
        prompter=prompter or ScriptedPrompter(),
        command_runner=runner,
    )


def _init(root: Path, project_type: str = "library") -> None:
    assert _run(root, "init", "--yes", "--type", project_type, "--name", "demo") == 0


def _history_lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if line.startswith(("  OK ", "  ERR "))]


def test_init_status_and_history_scenario(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    assert "AI workflow initialized!" in capsys.readouterr().out

    assert _run(tmp_path, "status") == 0
    status_out = capsys.readouterr().out
    assert "Name: demo" in status_out
    assert "Type: library" in status_out

    assert _run(tmp_path, "context", "clear") == 0
    assert _run(tmp_path, "story", "create", "--title", "Add login", "--description", "d") == 0
    assert _run(tmp_path, "implement", "feature") == 0
    assert _run(tmp_path, "checklist", "create", "login") == 0
    capsys.readouterr()

    assert _run(tmp_path, "context", "show") == 0
    lines = _history_lines(capsys.readouterr().out)

    assert [line.split(" (", 1)[0] for line in lines] == [
        "  OK story create Add login",
        "  OK implement feature",
        "  OK checklist create login",
    ]
    assert (tmp_path / ".ai" / "stories" / "add-login.md").is_file()
    assert (tmp_path / ".ai" / "checklists" / "login.md").is_file()
    assert (tmp_path / ".ai" / "logs").is_dir()


def test_init_prompts_for_missing_answers(tmp_path: Path) -> None:
    prompter = ScriptedPrompter(answers=["prompted", "cli", "A CLI tool"])

    assert _run(tmp_path, "init", prompter=prompter) == 0

    project = load_yaml_file(tmp_path / ".ai" / "config.yaml")["project"]
    assert project == {"name": "prompted", "type": "cli", "description": "A CLI tool"}


def test_init_refuses_existing_config_without_force(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    capsys.readouterr()

    assert _run(tmp_path, "init", "--yes") == ExitCode.CONFIG_ERROR
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "--force" in err
    assert "Traceback" not in err


def test_commands_requiring_config_fail_cleanly(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(tmp_path, "status") == ExitCode.CONFIG_ERROR

    assert capsys.readouterr().err.strip() == (
        "error: no project config found at .ai/config.yaml; run 'ai-dev init' first"
    )


def test_config_sync_overwrite_replaces_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    template = {
        "name": "team",
        "project": {"name": "team-project", "type": "webapp", "description": ""},
        "development_workflow": {},
    }
    save_yaml_file(tmp_path / ".ai" / "template.yaml", template)

    assert _run(tmp_path, "config", "sync", "--force") == 0

    assert load_yaml_file(tmp_path / ".ai" / "config.yaml") == template
    assert "Updated .ai/config.yaml" in capsys.readouterr().out


def test_config_sync_declined_leaves_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    before = load_yaml_file(tmp_path / ".ai" / "config.yaml")
    save_yaml_file(tmp_path / ".ai" / "template.yaml", {"name": "other"})

    exit_code = _run(tmp_path, "config", "sync", prompter=ScriptedPrompter(confirms=[False]))

    assert exit_code == 0
    assert "Sync cancelled." in capsys.readouterr().out
    assert load_yaml_file(tmp_path / ".ai" / "config.yaml") == before


def test_config_sync_merge_backup_and_restore(tmp_path: Path) -> None:
    _init(tmp_path)
    before = load_yaml_file(tmp_path / ".ai" / "config.yaml")
    save_yaml_file(tmp_path / "team.yaml", {"test": {"command": "vitest"}})

    assert _run(tmp_path, "config", "sync", "--template", "team.yaml", "--merge", "--backup") == 0

    merged = load_yaml_file(tmp_path / ".ai" / "config.yaml")
    assert merged["test"] == {"command": "vitest"}
    assert merged["project"] == before["project"]

    assert _run(tmp_path, "config", "restore") == 0
    assert load_yaml_file(tmp_path / ".ai" / "config.yaml") == before


def test_config_sync_missing_template(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, "config", "sync", "--force") == ExitCode.CONFIG_ERROR

    err = capsys.readouterr().err
    assert err.startswith("error: Template not found: ")
    assert err.rstrip().endswith("template.yaml")


def test_config_validate_reports_issues(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    assert _run(tmp_path, "config", "validate") == 0
    capsys.readouterr()

    save_yaml_file(tmp_path / ".ai" / "config.yaml", {"project": {"name": "x"}})

    assert _run(tmp_path, "config", "validate") == 1
    out = capsys.readouterr().out
    assert "project.type: missing required field" in out
    assert "development_workflow: missing required field" in out


def test_config_view_prints_yaml(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _init(tmp_path)
    capsys.readouterr()

    assert _run(tmp_path, "config", "view") == 0

    out = capsys.readouterr().out
    assert "  name: demo" in out
    assert "development_workflow:" in out


def test_workflow_list_and_show(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _init(tmp_path)
    capsys.readouterr()

    assert _run(tmp_path, "workflow", "list") == 0
    listing = capsys.readouterr().out
    for key in ("advanced", "basic", "bugfix", "feature", "modules/core/testing", "refactor"):
        assert f"- {key}" in listing

    assert _run(tmp_path, "workflow", "list", "--tag", "docs") == 0
    tagged = capsys.readouterr().out
    assert "- modules/docs" in tagged
    assert "- feature" not in tagged

    assert _run(tmp_path, "workflow", "show", "feature") == 0
    shown = capsys.readouterr().out
    assert "Step 1 (1_story): Describe the feature as a user story" in shown
    assert "Step 5 (5_review): Review the staged changes" in shown


def test_workflow_show_unknown_is_config_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(tmp_path, "workflow", "show", "hotfix") == ExitCode.CONFIG_ERROR

    assert capsys.readouterr().err.startswith("error: Workflow 'hotfix' not found (available: ")


def test_workflow_follow_records_progress(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    ContextStore(tmp_path).clear()
    prompter = ScriptedPrompter(answers=["story=.ai/stories/login.md", "files=tests/"])

    assert _run(tmp_path, "workflow", "follow", "basic", prompter=prompter) == 0

    out = capsys.readouterr().out
    assert "  Command: ai-dev implement feature --story .ai/stories/login.md" in out
    assert out.rstrip().endswith("Workflow completed!")
    ctx = ContextStore(tmp_path).load()
    assert ctx.current_step == "basic:3_verify"
    assert [entry.args for entry in ctx.history] == [
        ("basic", "1_plan"),
        ("basic", "2_implement"),
        ("basic", "3_verify"),
    ]
    assert ctx.data == {"lastCommand": "ai-dev test tests/"}


def test_workflow_follow_pause(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _init(tmp_path)
    ContextStore(tmp_path).clear()

    exit_code = _run(
        tmp_path, "workflow", "follow", "feature", prompter=ScriptedPrompter(confirms=[True, False])
    )

    assert exit_code == 0
    assert "Workflow paused. Resume when ready." in capsys.readouterr().out
    assert ContextStore(tmp_path).load().current_step == "feature:2_design"


def test_workflow_compose_writes_output(tmp_path: Path) -> None:
    _init(tmp_path)

    assert _run(tmp_path, "workflow", "compose", "modules/core/testing", "modules/core/review") == 0

    composed = load_yaml_file(tmp_path / ".ai" / "composed-workflow.yaml")
    assert composed["workflows"] == {"include": ["modules/core/testing", "modules/core/review"]}
    assert composed["quality"]["gates"] == ["tests", "review"]
    assert composed["test"] == {"command": "jest"}


def test_test_command_success_and_analysis(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    (tmp_path / ".ai" / "test-results.json").write_text(
        json.dumps(
            {
                "numTotalTestSuites": 1,
                "numTotalTests": 3,
                "numFailedTests": 0,
                "coverage": {
                    "statements": {"pct": 90},
                    "branches": {"pct": 50},
                    "functions": {"pct": 90},
                    "lines": {"pct": 90},
                },
            }
        ),
        encoding="utf-8",
    )
    runner = FakeCommandRunner()
    capsys.readouterr()

    assert _run(tmp_path, "test", "--coverage", "--analyze", runner=runner) == 0

    assert runner.command_lines == [
        "jest --coverage --coverageDirectory=.ai/coverage "
        "--json --outputFile=.ai/test-results.json"
    ]
    out = capsys.readouterr().out
    assert "- Total Tests: 3" in out
    assert "Warning: Branch coverage is below 80%" in out
    assert "Statement coverage" not in out


def test_test_command_failure_records_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    capsys.readouterr()

    exit_code = _run(tmp_path, "test", runner=FakeCommandRunner(exit_code=2))

    assert exit_code == ExitCode.COMMAND_FAILED
    assert capsys.readouterr().err.strip() == "error: Tests failed with exit code 2"
    last = ContextStore(tmp_path).load().history[-1]
    assert (last.command, last.status) == ("test", EntryStatus.ERROR)


def test_checklist_commands(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _init(tmp_path)
    assert _run(tmp_path, "checklist", "create", "login") == 0
    assert _run(tmp_path, "checklist", "update", "login", "--status", "Done") == 0
    capsys.readouterr()

    assert _run(tmp_path, "checklist", "list") == 0
    assert "  login      Done" in capsys.readouterr().out

    assert _run(tmp_path, "checklist", "create", "login") == ExitCode.CONFIG_ERROR
    assert _run(tmp_path, "checklist", "show", "ghost") == ExitCode.CONFIG_ERROR
    assert "No checklist found for ghost" in capsys.readouterr().err


def test_explore_and_review_with_patterns(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path, project_type="cli")
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "cli.py").write_text("print('hi')\n", encoding="utf-8")
    capsys.readouterr()

    assert _run(tmp_path, "explore") == 0
    explored = capsys.readouterr().out
    assert "- README.md (md, 7.0 B)" in explored
    assert "- src/cli.py (py, 12.0 B)" in explored

    assert _run(tmp_path, "review", "--files", "src/*.py", "--type", "style", "--checklist") == 0
    reviewed = capsys.readouterr().out
    assert "Reviewing src/cli.py... 1 lines" in reviewed
    assert "# Code Review Checklist" in reviewed
    assert (tmp_path / ".ai" / "templates" / "review-checklist.md").is_file()


def test_context_review_requires_guide(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    capsys.readouterr()

    assert _run(tmp_path, "context", "review") == ExitCode.CONFIG_ERROR
    assert "docs/guides/ai-workflow.md" in capsys.readouterr().err

    guide = tmp_path / "docs" / "guides" / "ai-workflow.md"
    guide.parent.mkdir(parents=True)
    guide.write_text("# Workflow guide\n", encoding="utf-8")

    assert _run(tmp_path, "context", "review") == 0
    assert "# Workflow guide" in capsys.readouterr().out


def test_status_views(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _init(tmp_path)
    (tmp_path / "TODO.md").write_text(
        "## Next Up\n- [ ] First\n- [ ] Second\n\n## Blockers\n- [ ] API keys\n",
        encoding="utf-8",
    )
    store = ContextStore(tmp_path)
    store.append_entry("test", EntryStatus.ERROR, message="Tests failed with exit code 1")
    capsys.readouterr()

    assert _run(tmp_path, "status") == 0
    summary = capsys.readouterr().out
    assert "  1. First" in summary
    assert "Active Branch:" in summary

    assert _run(tmp_path, "status", "blockers") == 0
    blockers = capsys.readouterr().out
    assert "- API keys" in blockers
    assert "Tests failed with exit code 1" in blockers

    assert _run(tmp_path, "status", "progress") == 0
    assert "Command history:" in capsys.readouterr().out


def test_bad_project_root(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = tmp_path / "nope"

    assert _run(missing, "status") == ExitCode.CONFIG_ERROR
    assert "project root is not a directory" in capsys.readouterr().err


def test_broken_config_yaml_is_config_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / ".ai").mkdir()
    (tmp_path / ".ai" / "config.yaml").write_text("project: [\n", encoding="utf-8")

    assert _run(tmp_path, "status") == ExitCode.CONFIG_ERROR
    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "Traceback" not in err


def test_bad_settings_do_not_block_config_repair(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    config_path = tmp_path / ".ai" / "config.yaml"
    document = load_yaml_file(config_path)
    document["settings"]["log_level"] = "LOUD"
    save_yaml_file(config_path, document)
    capsys.readouterr()

    assert _run(tmp_path, "config", "validate") == 1
    out = capsys.readouterr().out
    assert "settings: log_level must be one of" in out

    template = {
        "name": "team",
        "project": {"name": "demo", "type": "library", "description": ""},
        "development_workflow": {},
    }
    save_yaml_file(tmp_path / "tpl.yaml", template)

    assert _run(tmp_path, "config", "sync", "--template", "tpl.yaml", "--force") == 0
    assert load_yaml_file(config_path) == template
    assert _run(tmp_path, "config", "validate") == 0


def test_workflow_follow_survives_unbalanced_quote(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    ContextStore(tmp_path).clear()
    capsys.readouterr()
    prompter = ScriptedPrompter(answers=['story="login', "files=tests/"])

    assert _run(tmp_path, "workflow", "follow", "basic", prompter=prompter) == 0

    out = capsys.readouterr().out
    assert "ignored 'story=\"login'; expected name=value" in out
    assert sum(line.startswith("Step ") for line in out.splitlines()) == 3
    assert out.rstrip().endswith("Workflow completed!")
    assert ContextStore(tmp_path).load().current_step == "basic:3_verify"


def test_test_analyze_reports_unparseable_results(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _init(tmp_path)
    (tmp_path / ".ai" / "test-results.json").write_text("{not json", encoding="utf-8")
    capsys.readouterr()

    assert _run(tmp_path, "test", "--analyze", runner=FakeCommandRunner()) == 0

    out = capsys.readouterr().out
    assert "Failed to parse test results: " in out
    last = ContextStore(tmp_path).load().history[-1]
    assert (last.command, last.status) == ("test", EntryStatus.SUCCESS)


def test_context_commands_leave_uninitialized_project_untouched(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(tmp_path, "context", "show") == 0
    assert "No command history yet." in capsys.readouterr().out

    assert _run(tmp_path, "context", "clear") == 0
    assert "Context cleared." in capsys.readouterr().out

    assert not (tmp_path / ".ai").exists()
