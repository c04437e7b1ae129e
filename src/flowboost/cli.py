"""CLI entry point and argument parsing."""

import argparse
import sys
from importlib.metadata import version as get_version
from typing import Callable, Optional

try:
    __version__ = get_version("flowboost")
except Exception:
    __version__ = "dev"

from flowboost.config import load_flow_config
from flowboost.errors import ConfigurationInvalid, FlowboostError
from flowboost.flows import (
    FlowContext,
    build_context,
    commit_and_publish_all,
    conflict_check,
    create_merge_request,
    publish_to_all_targets,
    push_current,
    smart_branch,
)
from flowboost.git.gateway import GitGateway
from flowboost.models.config import FlowConfig
from flowboost.models.state import RunConfig
from flowboost.ui.output import YELLOW, NC, error, log, success
from flowboost.utils.debug import DEBUG_LOG


def _first(args: list[str]) -> Optional[str]:
    return args[0] if args else None


def _run_push(ctx: FlowContext, args: list[str]) -> bool:
    return push_current(ctx).status != "failed"


def _run_push_mr(ctx: FlowContext, args: list[str]) -> bool:
    return create_merge_request(ctx, _first(args)).status != "failed"


def _run_push_mr_all(ctx: FlowContext, args: list[str]) -> bool:
    publish_to_all_targets(ctx)
    return True


def _run_commit_push_mr_all(ctx: FlowContext, args: list[str]) -> bool:
    message = " ".join(args) or None
    commit_and_publish_all(ctx, message)
    return True


def _run_smart_branch(ctx: FlowContext, args: list[str]) -> bool:
    smart_branch(ctx, _first(args))
    return True


def _run_conflict_check(ctx: FlowContext, args: list[str]) -> bool:
    return conflict_check(ctx, _first(args)) is not None


# Alias dispatch table
ALIASES: dict[str, Callable[[FlowContext, list[str]], bool]] = {
    "push": _run_push,
    "push-mr": _run_push_mr,
    "push-mr-all": _run_push_mr_all,
    "commit-push-mr-all": _run_commit_push_mr_all,
    "smart-branch": _run_smart_branch,
    "conflict-check": _run_conflict_check,
}


def parse_args(argv: Optional[list[str]] = None) -> RunConfig:
    parser = argparse.ArgumentParser(
        prog="flowboost",
        description="flowboost - guided git branching, pushing and GitLab merge requests.",
        epilog="""
Commands:
  flowboost init                      Create .flowboost/config.yaml for this project
  flowboost login                     Authenticate with Slack (OAuth)
  flowboost logout                    Clear stored Slack credentials

Aliases:
  %(prog)s push                       Push the current branch
  %(prog)s push-mr [target]           Push and open a merge request (default: main branch)
  %(prog)s push-mr-all                Merge requests to every configured target branch
  %(prog)s commit-push-mr-all <msg>   Commit all changes, then push-mr-all
  %(prog)s smart-branch [base]        Create a branch following the naming conventions
  %(prog)s conflict-check <target>    List files changed on both sides since the merge-base

Configuration:
  defaults < ~/.config/flowboost/config.yaml < .flowboost/config.yaml

Safety:
  - Every reset, force-push and stash discard asks first
  - Choosing abort leaves the repository untouched
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("alias", metavar="ALIAS", help=f"One of: {', '.join(ALIASES)}")
    parser.add_argument("args", metavar="ARG", nargs="*", help="Alias arguments")
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo every git command before it runs",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Enable debug mode - logs every git command and its output to {DEBUG_LOG}",
    )
    args = parser.parse_args(argv)
    return RunConfig(alias=args.alias, args=args.args, debug=args.debug, verbose=args.verbose)


def log_config(run: RunConfig, config: FlowConfig) -> None:
    """Log configuration status."""
    log(f"Running {YELLOW}{run.alias}{NC} (main branch: {config.main_branch})")
    overrides = [s for s in config.sources if s != "defaults"]
    if overrides:
        log(f"Config overrides: {', '.join(overrides)}")
    if run.verbose:
        log("Verbose mode enabled")


def _handle_command(argv: list[str]) -> None:
    """Commands handled before argparse (which expects an alias)."""
    command = argv[0]
    if command == "login":
        from flowboost.auth import run_login_flow
        from flowboost.ui.prompts import TerminalPrompter

        if run_login_flow(TerminalPrompter()):
            success("Logged in to Slack successfully.")
        else:
            error("Login failed.")
            sys.exit(1)
        sys.exit(0)

    if command == "logout":
        from flowboost.auth import clear_tokens

        clear_tokens()
        log("Logged out. Stored Slack credentials cleared.")
        sys.exit(0)

    if command == "init":
        from flowboost.init import run_init

        run_init(yes="--yes" in argv or "-y" in argv)
        sys.exit(0)


def main() -> None:
    argv = sys.argv[1:]
    if argv and argv[0] in ("login", "logout", "init"):
        _handle_command(argv)

    run = parse_args(argv)

    handler = ALIASES.get(run.alias)
    if handler is None:
        error(f"Alias {run.alias} not found. Available: {', '.join(ALIASES)}")
        sys.exit(1)

    gateway = GitGateway(debug=run.debug, verbose=run.verbose)
    try:
        has_remote = gateway.has_remote_url()
    except FlowboostError as e:
        error(f"Not a git repository (or git failed): {e}")
        sys.exit(1)
    if not has_remote:
        error("No remote URL configured for this repository.")
        log("Add one with: git remote add origin <url>")
        sys.exit(1)

    try:
        config = load_flow_config()
    except ConfigurationInvalid as e:
        error(str(e))
        sys.exit(1)

    log_config(run, config)
    ctx = build_context(config, gateway, debug=run.debug)

    try:
        ok = handler(ctx, run.args)
    except KeyboardInterrupt:
        print()
        log("Interrupted.")
        sys.exit(130)
    except FlowboostError as e:
        error(f"Error executing alias {run.alias}: {e}")
        sys.exit(1)

    if not ok:
        sys.exit(1)
