"""Command-line interface router for ai-dev-workflow."""

from __future__ import annotations

import argparse
import os
import shlex
import subprocess
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol

import yaml

from ai_dev_workflow import __version__
from ai_dev_workflow.config import (
    ConfigResolver,
    ConfigValidationError,
    ProjectConfig,
    Settings,
    SettingsError,
    SyncStrategy,
    load_settings,
    validate_config,
)
from ai_dev_workflow.config.scaffold import ProjectAnswers, initialize_project
from ai_dev_workflow.constants import (
    AI_DIR,
    CONFIG_PATH,
    DEFAULT_TEMPLATE_PATH,
    IMPLEMENTATION_TYPES,
    LOG_DIR,
    PROJECT_TYPES,
    REVIEW_TYPES,
    SCAFFOLD_SUBDIRS,
    TEST_RESULTS_PATH,
    TODO_PATH,
    WORKFLOW_GUIDE_PATH,
)
from ai_dev_workflow.context import (
    ContextData,
    ContextStore,
    EntryStatus,
    display_context,
    format_context,
)
from ai_dev_workflow.guidance import (
    ChecklistManager,
    ProjectExplorer,
    ensure_review_checklist,
    execute_ai_command,
    expand_review_types,
    review_notes,
    section_items,
    select_files,
)
from ai_dev_workflow.guidance.todo import BLOCKERS_HEADING, NEXT_UP_HEADING, read_todo
from ai_dev_workflow.observability import LoggingConfig, get_logger, setup_logging, shutdown_logging
from ai_dev_workflow.persistence import dump_yaml, save_yaml_file
from ai_dev_workflow.resources import packaged_workflows_dir
from ai_dev_workflow.ui.prompts import ConsolePrompter
from ai_dev_workflow.ui.render import CLIRenderer, create_renderer
from ai_dev_workflow.utils.git import git_snapshot
from ai_dev_workflow.verification import (
    RunnerFailure,
    RunnerOptions,
    coverage_warnings,
    format_summary,
    load_results,
    run_tests,
)
from ai_dev_workflow.verification.test_runner import CommandRunner
from ai_dev_workflow.workflow import WorkflowCatalog, WorkflowRunner, step_labels

DEFAULT_COMPOSE_OUTPUT: Final[str] = (AI_DIR / "composed-workflow.yaml").as_posix()
NEXT_UP_PREVIEW: Final[int] = 3
HELPFUL_COMMANDS: Final[tuple[str, ...]] = (
    "ai-dev story create    # Create new story",
    "ai-dev implement       # Get implementation guidance",
    "ai-dev review          # Review code changes",
    "ai-dev status full     # Show full status",
)

_LOGGER = get_logger(__name__)


class Prompter(Protocol):
    def ask(self, message: str, default: str = "") -> str: ...

    def confirm(self, message: str, *, default: bool = True) -> bool: ...

    def choose(self, message: str, choices: Sequence[str], *, default: str | None = None) -> str: ...


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="ai-dev",
        description=(
            "ai-dev - AI-guided development workflow tool.\n\n"
            "Common workflows:\n"
            "  ai-dev init                   Set up .ai/ in the current project\n"
            "  ai-dev workflow list          List available workflows\n"
            "  ai-dev workflow follow NAME   Walk through a workflow step by step\n"
            "  ai-dev status                 Show project status and next steps\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--project-root",
        default=".",
        help="Project root directory (default: current working directory).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output and echo structured logs to stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Accepted for compatibility; output is always plain text.",
    )
    common.add_argument(
        "--log-level",
        default=None,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Log level for .ai/logs/ai-dev.jsonl (default: settings.log_level).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # init ----------------------------------------------------------------
    init_parser = subparsers.add_parser(
        "init",
        parents=[common],
        help="Initialize the AI workflow in a project",
        description=(
            "Create .ai/ with config.yaml, patterns/ and templates/.\n\n"
            "Examples:\n"
            "  ai-dev init\n"
            "  ai-dev init --type library --name mylib --yes\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    init_parser.add_argument("--type", "-t", choices=PROJECT_TYPES, default=None)
    init_parser.add_argument("--name", default=None, help="Project name (default: directory name)")
    init_parser.add_argument("--description", "-d", default=None)
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing config")
    init_parser.add_argument(
        "--yes", "-y", action="store_true", help="Accept defaults instead of prompting"
    )
    init_parser.set_defaults(handler=_cmd_init)

    # status --------------------------------------------------------------
    status_parser = subparsers.add_parser(
        "status",
        parents=[common],
        help="Show project status, context and next steps",
    )
    status_parser.add_argument(
        "view",
        nargs="?",
        default="summary",
        choices=("summary", "progress", "blockers", "full"),
    )
    status_parser.set_defaults(handler=_cmd_status)

    # review --------------------------------------------------------------
    review_parser = subparsers.add_parser(
        "review",
        parents=[common],
        help="Review staged changes or matching files",
    )
    review_parser.add_argument("--files", "-f", default=None, help="Glob relative to the root")
    review_parser.add_argument("--type", "-t", default="all", choices=(*REVIEW_TYPES, "all"))
    review_parser.add_argument(
        "--checklist", "-c", action="store_true", help="Show the review checklist"
    )
    review_parser.set_defaults(handler=_cmd_review)

    # explore -------------------------------------------------------------
    explore_parser = subparsers.add_parser(
        "explore",
        parents=[common],
        help="List priority project files or files matching a pattern",
    )
    explore_parser.add_argument("--pattern", "-p", default=None)
    explore_parser.set_defaults(handler=_cmd_explore)

    # workflow ------------------------------------------------------------
    workflow_parser = subparsers.add_parser("workflow", help="List, show, follow and compose")
    workflow_sub = workflow_parser.add_subparsers(dest="workflow_command", required=True)

    wf_list = workflow_sub.add_parser("list", parents=[common], help="List workflows")
    wf_list.add_argument("--tag", default=None, help="Only workflows carrying this tag")
    wf_list.add_argument("--details", action="store_true", help="Show tags and dependencies")
    wf_list.set_defaults(handler=_cmd_workflow_list)

    wf_show = workflow_sub.add_parser("show", parents=[common], help="Show workflow steps")
    wf_show.add_argument("workflow_type")
    wf_show.set_defaults(handler=_cmd_workflow_show)

    wf_follow = workflow_sub.add_parser(
        "follow", parents=[common], help="Walk through a workflow interactively"
    )
    wf_follow.add_argument("workflow_type", nargs="?", default=None)
    wf_follow.add_argument("--feature", default=None, help="Feature name for ${feature}")
    wf_follow.set_defaults(handler=_cmd_workflow_follow)

    wf_compose = workflow_sub.add_parser(
        "compose", parents=[common], help="Compose workflow modules into one config"
    )
    wf_compose.add_argument("modules", nargs="+")
    wf_compose.add_argument("--output", "-o", default=DEFAULT_COMPOSE_OUTPUT)
    wf_compose.set_defaults(handler=_cmd_workflow_compose)

    # context -------------------------------------------------------------
    context_parser = subparsers.add_parser(
        "context",
        parents=[common],
        help="Show, clear or review the project context",
    )
    context_parser.add_argument(
        "action", nargs="?", default="show", choices=("show", "clear", "review")
    )
    context_parser.set_defaults(handler=_cmd_context)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser("config", help="Manage .ai/config.yaml")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)

    cfg_sync = config_sub.add_parser("sync", parents=[common], help="Sync config from a template")
    cfg_sync.add_argument("--template", "-t", default=DEFAULT_TEMPLATE_PATH.as_posix())
    cfg_sync.add_argument(
        "--merge", action="store_true", help="Layer the template onto the existing config"
    )
    cfg_sync.add_argument("--backup", "-b", action="store_true", help="Write config.yaml.bak first")
    cfg_sync.add_argument("--force", "-f", action="store_true", help="Skip confirmation")
    cfg_sync.set_defaults(handler=_cmd_config_sync)

    cfg_restore = config_sub.add_parser("restore", parents=[common], help="Restore the backup")
    cfg_restore.set_defaults(handler=_cmd_config_restore)

    cfg_validate = config_sub.add_parser("validate", parents=[common], help="Validate config")
    cfg_validate.set_defaults(handler=_cmd_config_validate)

    cfg_view = config_sub.add_parser("view", parents=[common], help="Print the config")
    cfg_view.set_defaults(handler=_cmd_config_view)

    cfg_edit = config_sub.add_parser("edit", parents=[common], help="Open the config in $EDITOR")
    cfg_edit.set_defaults(handler=_cmd_config_edit)

    # story / implement ---------------------------------------------------
    story_parser = subparsers.add_parser("story", help="Create user stories")
    story_sub = story_parser.add_subparsers(dest="story_command", required=True)
    story_create = story_sub.add_parser("create", parents=[common], help="Create a story")
    story_create.add_argument("--title", "-t", default=None)
    story_create.add_argument("--description", "-d", default=None)
    story_create.set_defaults(handler=_cmd_story_create)

    implement_parser = subparsers.add_parser(
        "implement", parents=[common], help="Get implementation guidance"
    )
    implement_parser.add_argument("implementation_type", choices=IMPLEMENTATION_TYPES)
    implement_parser.add_argument("--story", "-s", default=None)
    implement_parser.set_defaults(handler=_cmd_implement)

    # checklist -----------------------------------------------------------
    checklist_parser = subparsers.add_parser("checklist", help="Manage feature checklists")
    checklist_sub = checklist_parser.add_subparsers(dest="checklist_command", required=True)

    cl_create = checklist_sub.add_parser("create", parents=[common], help="Create a checklist")
    cl_create.add_argument("feature")
    cl_create.add_argument("--type", "-t", dest="branch_type", default="feature")
    cl_create.add_argument("--force", "-f", action="store_true")
    cl_create.set_defaults(handler=_cmd_checklist_create)

    cl_list = checklist_sub.add_parser("list", parents=[common], help="List checklists")
    cl_list.set_defaults(handler=_cmd_checklist_list)

    cl_show = checklist_sub.add_parser("show", parents=[common], help="Show a checklist")
    cl_show.add_argument("feature")
    cl_show.set_defaults(handler=_cmd_checklist_show)

    cl_update = checklist_sub.add_parser("update", parents=[common], help="Update a checklist")
    cl_update.add_argument("feature")
    cl_update.add_argument("--status", "-s", default=None)
    cl_update.add_argument("--notes", "-n", default=None)
    cl_update.set_defaults(handler=_cmd_checklist_update)

    # test ----------------------------------------------------------------
    test_parser = subparsers.add_parser(
        "test",
        parents=[common],
        help="Run the project's test command",
        description=(
            "Run test.command from .ai/config.yaml (default: jest).\n\n"
            "Examples:\n"
            "  ai-dev test --coverage\n"
            "  ai-dev test --analyze\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    test_parser.add_argument("--files", default=None)
    test_parser.add_argument("--update", "-u", action="store_true")
    test_parser.add_argument("--watch", "-w", action="store_true")
    test_parser.add_argument("--coverage", "-c", action="store_true")
    test_parser.add_argument("--analyze", "-a", action="store_true")
    test_parser.set_defaults(handler=_cmd_test)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    prompter: Prompter | None = None,
    command_runner: CommandRunner | None = None,
) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2
    namespace.prompter = prompter if prompter is not None else ConsolePrompter()
    namespace.command_runner = command_runner

    try:
        _start_logging(namespace)
        _LOGGER.debug("command_started", command=namespace.command)
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_init(args: argparse.Namespace) -> int:
    root = _project_root(args)
    prompter: Prompter = args.prompter
    accept_defaults = _flag(args, "yes")

    name = _optional_str(args.name)
    if name is None:
        name = root.name if accept_defaults else prompter.ask("Project name:", root.name)
    project_type = _optional_str(args.type)
    if project_type is None:
        project_type = (
            PROJECT_TYPES[0]
            if accept_defaults
            else prompter.choose("Project type:", PROJECT_TYPES, default=PROJECT_TYPES[0])
        )
    description = args.description
    if description is None:
        description = "" if accept_defaults else prompter.ask("Project description:")

    try:
        answers = ProjectAnswers(name=name, type=project_type, description=description)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    config_path = initialize_project(root, answers, force=_flag(args, "force"))

    _record(args, "init", command_args=[project_type], message=f"Initialized {name}")

    renderer = _get_renderer(args)
    renderer.text("AI workflow initialized!")
    renderer.section("Created .ai directory with:")
    renderer.items(
        [
            f"{config_path.relative_to(root).as_posix()}: core AI guidance",
            *(f"{AI_DIR.as_posix()}/{subdir}/" for subdir in SCAFFOLD_SUBDIRS),
        ]
    )
    renderer.next_steps(["ai-dev workflow list", "ai-dev workflow follow feature"])
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = _require_config(root)
    renderer = _get_renderer(args)
    view: str = args.view

    renderer.text("AI Dev Workflow Status")
    renderer.section("Project Configuration:")
    renderer.items(
        [
            f"Name: {config.project_name or '(unset)'}",
            f"Type: {config.project_type or '(unset)'}",
            f"Description: {config.description or ''}",
        ]
    )

    if view == "progress":
        ctx = _context_store(args).load()
        renderer.section("Progress:")
        for line in format_context(ctx):
            renderer.text(line)
        return 0

    todo_text = read_todo(root / TODO_PATH)
    if view == "blockers":
        ctx = _context_store(args).load()
        failures = [entry for entry in ctx.history if entry.status is EntryStatus.ERROR]
        renderer.section("Failed commands:")
        if failures:
            renderer.items(
                [f"{entry.command} ({entry.timestamp}): {entry.message or ''}" for entry in failures]
            )
        else:
            renderer.text("  none")
        blockers = section_items(todo_text, BLOCKERS_HEADING) if todo_text else []
        renderer.section("Blockers:")
        if blockers:
            renderer.items(blockers)
        else:
            renderer.text("  none")
        return 0

    snapshot = git_snapshot(root)
    renderer.section("Current Context:")
    renderer.items(
        [
            f"Active Branch: {snapshot.branch}",
            f"Last Commit: {snapshot.last_commit}",
            f"Modified Files: {len(snapshot.modified_files)}",
        ]
    )

    next_up = section_items(todo_text, NEXT_UP_HEADING) if todo_text else []
    renderer.section("Next Steps:")
    if next_up:
        renderer.numbered(next_up[:NEXT_UP_PREVIEW])
    else:
        renderer.text(f"  No unchecked items under '## {NEXT_UP_HEADING}' in {TODO_PATH}")

    if view == "full":
        renderer.section("Full TODO List:")
        renderer.text(todo_text if todo_text is not None else f"No {TODO_PATH} found")

    renderer.section("Helpful Commands:")
    renderer.items(list(HELPFUL_COMMANDS))
    return 0


def _cmd_review(args: argparse.Namespace) -> int:
    root = _project_root(args)
    renderer = _get_renderer(args)
    review_types = expand_review_types(args.type)

    renderer.text("Starting AI Code Review...")
    selection = select_files(root, _optional_str(args.files))
    if not selection.git_available:
        renderer.warning("Unable to get staged files. Are you in a git repository?")
    if not selection.files:
        renderer.text("No files to review. Stage some changes or specify files with --files")
        return 0

    renderer.section(f"Found {len(selection.files)} files to review ({selection.source}):")
    renderer.items(list(selection.files))

    if _flag(args, "checklist"):
        checklist_path, created = ensure_review_checklist(root)
        if created:
            renderer.text("No review checklist found. Created one.")
        renderer.section("Review Checklist:")
        renderer.text(checklist_path.read_text(encoding="utf-8"))

    for review_type in review_types:
        renderer.section(f"Performing {review_type} review...")
        for relative in selection.files:
            for line in review_notes(root, relative, review_type):
                renderer.text(line)
            response = execute_ai_command(
                "review", {"file": relative, "type": review_type}, root=root
            )
            for line in response.lines:
                renderer.text(f"  {line}")

    renderer.section("Review Summary")
    renderer.kv("Files Reviewed", len(selection.files))
    renderer.numbered(
        [
            "Address highlighted issues",
            "Run tests to verify changes",
            "Update documentation if needed",
        ]
    )
    _record(args, "review", command_args=[args.type], message=f"{len(selection.files)} files")
    return 0


def _cmd_explore(args: argparse.Namespace) -> int:
    root = _project_root(args)
    renderer = _get_renderer(args)
    explorer = ProjectExplorer(root)
    pattern = _optional_str(args.pattern)

    if pattern is not None:
        files = explorer.find_files(pattern)
        if not files:
            renderer.text(f"No files found matching pattern: {pattern}")
            return 0
        renderer.text(f"Found {len(files)} files matching pattern: {pattern}")
    else:
        config = ConfigResolver(root).load_config()
        files = explorer.find_priority_files(config.project_type if config else None)
        if not files:
            renderer.text("No priority files found. Try initializing the project first:")
            renderer.text("  $ ai-dev init")
            return 0
        renderer.text("Priority files in project:")

    for relative in files:
        metadata = explorer.metadata(relative)
        if metadata is not None:
            renderer.text(f"- {metadata.describe()}")
    _record(args, "explore", command_args=[pattern] if pattern else None)
    return 0


def _cmd_workflow_list(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = ConfigResolver(root).load_config()
    catalog = _catalog(root, config, _settings(args, config))
    renderer = _get_renderer(args)

    entries = catalog.select(tag=_optional_str(args.tag))
    if not entries:
        renderer.text("No workflows found.")
        return 0

    renderer.text("Available workflows:")
    for entry in entries:
        renderer.text(f"- {entry.key}")
        if entry.description:
            renderer.text(f"    {entry.description}")
        if _flag(args, "details"):
            renderer.text(f"    Source: {entry.origin.value}")
            if entry.tags:
                renderer.text(f"    Tags: {', '.join(entry.tags)}")
            if entry.dependencies:
                renderer.text(f"    Dependencies: {', '.join(entry.dependencies)}")
    return 0


def _cmd_workflow_show(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = ConfigResolver(root).load_config()
    settings = _settings(args, config)
    entry = _catalog(root, config, settings).get(args.workflow_type)
    definition = entry.definition()
    renderer = _get_renderer(args)

    renderer.text(f"{definition.name} workflow: {definition.description}")
    for label, key, step in step_labels(definition, settings.step_numbering):
        renderer.section(f"Step {label} ({key}): {step.description}")
        if step.command:
            renderer.text(f"  Command template: {step.command}")
        if step.guidelines:
            renderer.text("  Guidelines:")
            renderer.items(list(step.guidelines))
        if step.files:
            renderer.text("  Files:")
            renderer.items(list(step.files))
        if step.steps:
            renderer.text("  Sub-steps:")
            renderer.items(list(step.steps))

    if definition.tags:
        renderer.section(f"Tags: {', '.join(definition.tags)}")
    if definition.dependencies:
        renderer.section(f"Dependencies: {', '.join(definition.dependencies)}")
    if definition.configuration is not None:
        renderer.section("Configuration:")
        renderer.text(dump_yaml(definition.configuration).rstrip("\n"))
    return 0


def _cmd_workflow_follow(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = ConfigResolver(root).load_config()
    settings = _settings(args, config)
    catalog = _catalog(root, config, settings)
    prompter: Prompter = args.prompter

    workflow_type = _optional_str(args.workflow_type)
    if workflow_type is None:
        keys = catalog.keys()
        if not keys:
            raise CLIError("no workflows available", exit_code=2)
        workflow_type = prompter.choose("Workflow to follow:", keys, default=keys[0])

    definition = catalog.get(workflow_type).definition()
    store = _context_store(args) if (root / AI_DIR).is_dir() else None

    def _on_command(resolved: str, values: Mapping[str, str]) -> None:
        if store is not None:
            store.set_data("lastCommand", resolved)

    runner = WorkflowRunner(
        definition,
        renderer=_get_renderer(args),
        prompter=prompter,
        context_store=store,
        numbering=settings.step_numbering,
        on_command=_on_command,
    )
    runner.follow(feature=_optional_str(args.feature))
    return 0


def _cmd_workflow_compose(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = ConfigResolver(root).load_config()
    catalog = _catalog(root, config, _settings(args, config))

    composed = catalog.compose(list(args.modules))
    output = _resolve_under_root(root, args.output)
    save_yaml_file(output, composed)

    _record(args, "workflow compose", command_args=list(args.modules))
    _get_renderer(args).text(f"Workflow configuration saved to {_display_path(output, root)}")
    return 0


def _cmd_context(args: argparse.Namespace) -> int:
    root = _project_root(args)
    renderer = _get_renderer(args)
    action: str = args.action
    initialized = (root / AI_DIR).is_dir()

    if action == "clear":
        if initialized:
            _context_store(args).clear()
        renderer.text("Context cleared.")
        return 0

    if action == "review":
        config_path = root / CONFIG_PATH
        guide_path = root / WORKFLOW_GUIDE_PATH
        missing = [
            path.relative_to(root).as_posix() for path in (config_path, guide_path) if not path.is_file()
        ]
        if missing:
            raise CLIError(
                "required AI workflow files are missing: "
                + ", ".join(missing)
                + "; run 'ai-dev init' to set up the AI workflow",
                exit_code=2,
            )
        renderer.text(f"Project Configuration ({CONFIG_PATH}):")
        renderer.text(config_path.read_text(encoding="utf-8"))
        renderer.text(f"Workflow Guidelines ({WORKFLOW_GUIDE_PATH}):")
        renderer.text(guide_path.read_text(encoding="utf-8"))
        renderer.text(
            "AI Assistant: Please review the above files and confirm your understanding "
            "of the workflow and configuration."
        )
        return 0

    ctx = _context_store(args).load() if initialized else ContextData.empty()
    display_context(ctx, verbose=_flag(args, "verbose"), renderer=renderer)
    return 0


def _cmd_config_sync(args: argparse.Namespace) -> int:
    root = _project_root(args)
    resolver = ConfigResolver(root)
    strategy = SyncStrategy.MERGE if _flag(args, "merge") else SyncStrategy.OVERWRITE
    renderer = _get_renderer(args)

    if (
        strategy is SyncStrategy.OVERWRITE
        and resolver.config_path.is_file()
        and not _flag(args, "force")
        and not args.prompter.confirm(f"Overwrite {CONFIG_PATH} with {args.template}?", default=True)
    ):
        renderer.text("Sync cancelled.")
        return 0

    renderer.text("Syncing project configuration with template...")
    result = resolver.sync_config_with_template(
        args.template, strategy=strategy, backup=_flag(args, "backup")
    )
    if result.backup_path is not None:
        renderer.kv("Backup", _display_path(result.backup_path, root))
    renderer.kv("Strategy", result.strategy.value)
    renderer.text(f"Updated {_display_path(result.config_path, root)}")
    _record(args, "config sync", command_args=[args.template, strategy.value])
    return 0


def _cmd_config_restore(args: argparse.Namespace) -> int:
    root = _project_root(args)
    restored = ConfigResolver(root).restore_backup()
    _record(args, "config restore")
    _get_renderer(args).text(f"Restored {_display_path(restored, root)} from backup")
    return 0


def _cmd_config_validate(args: argparse.Namespace) -> int:
    root = _project_root(args)
    resolver = ConfigResolver(root)
    document = resolver.load_document()
    if document is None and not resolver.config_path.is_file():
        raise CLIError(_missing_config_message(), exit_code=2)

    result = validate_config(document)
    renderer = _get_renderer(args)
    if result.is_valid:
        renderer.ok(f"{CONFIG_PATH} is valid")
        return 0
    renderer.fail(f"{CONFIG_PATH} has {len(result.issues)} issue(s)")
    renderer.items([f"{issue.path}: {issue.message}" for issue in result.issues])
    return 1


def _cmd_config_view(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = _require_config(root)
    _get_renderer(args).text(dump_yaml(config.to_document()).rstrip("\n"))
    return 0


def _cmd_config_edit(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config_path = root / CONFIG_PATH
    if not config_path.is_file():
        raise CLIError(_missing_config_message(), exit_code=2)
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
    if not editor:
        raise CLIError("set $EDITOR (or $VISUAL) to edit the config", exit_code=2)

    try:
        completed = subprocess.run([*shlex.split(editor), str(config_path)], check=False)
    except OSError as exc:
        raise CLIError(f"could not start editor {editor!r}: {exc}", exit_code=2) from exc
    if completed.returncode != 0:
        raise CLIError(f"editor exited with code {completed.returncode}")

    # Re-read so a broken edit is reported right away.
    resolver = ConfigResolver(root)
    try:
        resolver.load_config()
    except (yaml.YAMLError, ConfigValidationError) as exc:
        raise CLIError(f"{CONFIG_PATH} is no longer valid YAML: {exc}", exit_code=2) from exc
    _get_renderer(args).text(f"Saved {CONFIG_PATH}")
    return 0


def _cmd_story_create(args: argparse.Namespace) -> int:
    root = _project_root(args)
    prompter: Prompter = args.prompter
    title = _optional_str(args.title) or prompter.ask("Story title:")
    description = args.description
    if description is None:
        description = prompter.ask("Story description:")

    response = execute_ai_command(
        "story:create", {"title": title, "description": description}, root=root
    )
    renderer = _get_renderer(args)
    for line in response.lines:
        renderer.text(line)
    _record(args, "story create", command_args=[title])
    return 0


def _cmd_implement(args: argparse.Namespace) -> int:
    root = _project_root(args)
    response = execute_ai_command(
        "implement",
        {"type": args.implementation_type, "story": _optional_str(args.story)},
        root=root,
    )
    renderer = _get_renderer(args)
    for line in response.lines:
        renderer.text(line)
    _record(args, "implement", command_args=[args.implementation_type])
    return 0


def _cmd_checklist_create(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = ConfigResolver(root).load_config()
    settings = _settings(args, config)
    manager = ChecklistManager(root)
    try:
        path = manager.create(
            args.feature,
            branch_type=args.branch_type,
            coverage_target=settings.coverage_threshold,
            force=_flag(args, "force"),
        )
    except FileExistsError as exc:
        raise CLIError(f"{exc}; pass --force to replace it", exit_code=2) from exc

    renderer = _get_renderer(args)
    renderer.text(f"Created checklist for {args.feature}")
    renderer.kv("Location", _display_path(path, root))
    _record(args, "checklist create", command_args=[args.feature])
    return 0


def _cmd_checklist_list(args: argparse.Namespace) -> int:
    root = _project_root(args)
    renderer = _get_renderer(args)
    summaries = ChecklistManager(root).summaries()
    if not summaries:
        renderer.text("No checklists found")
        return 0
    renderer.table(
        ("Checklist", "Status"),
        [(summary.name, summary.status) for summary in summaries],
        title="Active Checklists:",
    )
    return 0


def _cmd_checklist_show(args: argparse.Namespace) -> int:
    root = _project_root(args)
    _get_renderer(args).text(ChecklistManager(root).show(args.feature).rstrip("\n"))
    return 0


def _cmd_checklist_update(args: argparse.Namespace) -> int:
    root = _project_root(args)
    status = _optional_str(args.status)
    notes = _optional_str(args.notes)
    ChecklistManager(root).update(args.feature, status=status, notes=notes)
    _get_renderer(args).text(f"Updated checklist for {args.feature}")
    _record(args, "checklist update", command_args=[args.feature])
    return 0


def _cmd_test(args: argparse.Namespace) -> int:
    root = _project_root(args)
    config = _require_config(root)
    settings = _settings(args, config)
    options = RunnerOptions(
        files=_optional_str(args.files),
        update=_flag(args, "update"),
        watch=_flag(args, "watch"),
        coverage=_flag(args, "coverage"),
        analyze=_flag(args, "analyze"),
    )
    renderer = _get_renderer(args)
    renderer.text(f"Running tests with {config.test_command}...")

    try:
        outcome = run_tests(root, config.test_command, options, runner=args.command_runner)
    except RunnerFailure as exc:
        _record(args, "test", status=EntryStatus.ERROR, message=str(exc))
        raise
    _record(args, "test", message=outcome.command_line)

    if options.analyze:
        renderer.section("AI Analysis of Test Results")
        try:
            summary = load_results(root / TEST_RESULTS_PATH)
        except ValueError as exc:
            renderer.text(f"Failed to parse test results: {exc}")
            return 0
        if summary is None:
            renderer.text("No test results found for analysis")
            return 0
        for line in format_summary(summary):
            renderer.text(line)
        for warning in coverage_warnings(summary, settings.coverage_threshold):
            renderer.warning(warning)
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _start_logging(args: argparse.Namespace) -> None:
    root = _project_root(args)
    try:
        settings = _settings(args, ConfigResolver(root).load_config())
    except (yaml.YAMLError, ConfigValidationError, SettingsError, OSError):
        # The command itself reports the broken config.
        settings = Settings().with_overrides(log_level=getattr(args, "log_level", None))
    log_dir = root / LOG_DIR if settings.log_to_file and (root / AI_DIR).is_dir() else None
    setup_logging(
        LoggingConfig(
            log_dir=log_dir,
            level=settings.log_level,
            log_to_stderr=_flag(args, "verbose"),
        )
    )


def _settings(args: argparse.Namespace, config: ProjectConfig | None) -> Settings:
    return load_settings(
        config.settings if config is not None else None,
        cli_overrides={"log_level": getattr(args, "log_level", None)},
    )


def _catalog(root: Path, config: ProjectConfig | None, settings: Settings) -> WorkflowCatalog:
    return WorkflowCatalog(
        packaged_dir=packaged_workflows_dir(),
        project_dir=_resolve_under_root(root, settings.workflows_dir),
        config_workflows=config.workflows if config is not None else None,
    )


def _context_store(args: argparse.Namespace) -> ContextStore:
    return ContextStore(_project_root(args))


def _record(
    args: argparse.Namespace,
    command: str,
    *,
    status: EntryStatus = EntryStatus.SUCCESS,
    message: str | None = None,
    command_args: Sequence[str] | None = None,
) -> None:
    root = _project_root(args)
    if not (root / AI_DIR).is_dir():
        return
    _context_store(args).append_entry(command, status, message=message, args=command_args)


def _require_config(root: Path) -> ProjectConfig:
    config = ConfigResolver(root).load_config()
    if config is None:
        raise CLIError(_missing_config_message(), exit_code=2)
    return config


def _missing_config_message() -> str:
    return f"no project config found at {CONFIG_PATH}; run 'ai-dev init' first"


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    """Retrieve or create a CLI renderer from the parsed namespace."""

    return create_renderer(verbose=_flag(args, "verbose"))


def _project_root(args: argparse.Namespace) -> Path:
    raw = _optional_str(getattr(args, "project_root", None)) or "."
    candidate = Path(raw).expanduser().resolve()
    if not candidate.is_dir():
        raise CLIError(f"project root is not a directory: {candidate}", exit_code=2)
    return candidate


def _resolve_under_root(root: Path, raw: str) -> Path:
    candidate = Path(raw).expanduser()
    return candidate if candidate.is_absolute() else root / candidate


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    parsed = value.strip()
    return parsed or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
