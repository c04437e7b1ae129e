"""flowboost init: interactive project setup."""

import os
import shlex
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Optional

import yaml

from flowboost.ui.output import BLUE, GRAY, GREEN, NC, YELLOW, error, log, success, warn

FLOWBOOST_DIR = Path(".flowboost")
CONFIG_FILE = FLOWBOOST_DIR / "config.yaml"

FALLBACK_MAIN_BRANCH = "main"


# --- Repository detection ---


def _git_lines(args: list[str]) -> list[str]:
    """Output lines of a read-only git command, [] on failure."""
    try:
        result = subprocess.run(["git", *args], capture_output=True, text=True)
    except OSError:
        return []
    if result.returncode != 0:
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def detect_default_branch(remote: str = "origin") -> Optional[str]:
    """Branch the remote HEAD points at, e.g. origin/HEAD -> origin/main gives 'main'."""
    lines = _git_lines(["symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD"])
    if not lines:
        return None
    ref = lines[0]
    prefix = f"{remote}/"
    return ref[len(prefix) :] if ref.startswith(prefix) else ref


def detect_remote_branches(remote: str = "origin") -> list[str]:
    prefix = f"{remote}/"
    branches = []
    for ref in _git_lines(["branch", "-r", "--format=%(refname:short)"]):
        if not ref.startswith(prefix) or ref == f"{remote}/HEAD":
            continue
        branches.append(ref[len(prefix) :])
    return branches


# --- Questions ---


def _ask(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    try:
        answer = input(f"  {prompt}{suffix}: ").strip()
    except (EOFError, KeyboardInterrupt):
        print()
        sys.exit(0)
    return answer or default


def _split_names(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def build_config(
    main_branch: str,
    targets: list[str],
    drafts: list[str],
    allow_temp_branches: bool,
    delete_after_merge: bool,
) -> dict:
    """Project config in the on-disk (camelCase) format."""
    if main_branch not in targets:
        targets = [main_branch] + targets
    return {
        "mergeRequestOptions": {
            "mainBranch": main_branch,
            "branches": [
                {"name": name, "isDraftPR": name in drafts, "requiredLabels": []}
                for name in targets
            ],
            "setToDeleteBranchAfterMainMerge": delete_after_merge,
            "allowToCreateTempBranches": allow_temp_branches,
        }
    }


def _ask_config() -> dict:
    detected = detect_default_branch()
    if detected:
        log(f"Detected default branch: {detected}")
    else:
        warn(f"Could not detect the remote default branch, assuming {FALLBACK_MAIN_BRANCH}")
    main_branch = _ask("Main branch", detected or FALLBACK_MAIN_BRANCH)

    remote_branches = detect_remote_branches()
    if remote_branches:
        print(f"  {GRAY}Remote branches: {', '.join(remote_branches)}{NC}")
    targets = _split_names(_ask("Merge request target branches (comma-separated)", main_branch))
    drafts = _split_names(_ask("Open merge requests as draft for (comma-separated)", ""))

    allow_temp = len(targets) > 1 and _ask(
        "Allow temporary branches for merge requests to several targets? [y/N]", "n"
    ).lower() in ("y", "yes")
    delete_after = _ask(
        f"Delete source branch after merging into {main_branch}? [y/N]", "n"
    ).lower() in ("y", "yes")

    return build_config(main_branch, targets, drafts, allow_temp, delete_after)


# --- Config preview and editing ---


def _config_to_yaml(config: dict) -> str:
    return yaml.dump(config, default_flow_style=False, sort_keys=False, width=120)


def _print_config_preview(config: dict) -> None:
    yaml_str = _config_to_yaml(config)
    print(f"\n{BLUE}{'-' * 50}{NC}")
    print(f"{GREEN}Generated {CONFIG_FILE}:{NC}\n")
    for line in yaml_str.splitlines():
        if line.startswith(" ") or line.startswith("- "):
            print(f"  {line}")
        else:
            print(f"  {YELLOW}{line}{NC}")
    print(f"\n{BLUE}{'-' * 50}{NC}")


def _open_in_editor(content: str) -> Optional[str]:
    """Open content in $EDITOR. Returns edited content or None on failure."""
    editor = os.environ.get("EDITOR", os.environ.get("VISUAL", "vi"))

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(content)
        tmp_path = f.name

    try:
        result = subprocess.run(shlex.split(editor) + [tmp_path])
        if result.returncode != 0:
            error(f"Editor '{editor}' exited with code {result.returncode}")
            return None
        return Path(tmp_path).read_text()
    finally:
        os.unlink(tmp_path)


def write_config(config: dict) -> None:
    FLOWBOOST_DIR.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        f.write("# flowboost project configuration\n")
        f.write(_config_to_yaml(config))


def run_init(yes: bool = False) -> None:
    """Interactive project setup. yes=True accepts every default."""
    print(f"\n{GREEN}flowboost init{NC}: configure flowboost for this repository\n")

    if CONFIG_FILE.exists() and not yes:
        warn(f"Found existing {CONFIG_FILE}")
        if _ask("Re-initialize? This will overwrite the config. [y/N]", "n").lower() not in (
            "y",
            "yes",
        ):
            log("Aborted.")
            sys.exit(0)

    if yes:
        main_branch = detect_default_branch() or FALLBACK_MAIN_BRANCH
        config = build_config(main_branch, [main_branch], [], False, False)
    else:
        config = _ask_config()

    _print_config_preview(config)

    answer = "" if yes else _ask(f"Write to {CONFIG_FILE}? (Y)es, (e)dit, (n)o", "y").lower()
    if answer in ("e", "edit"):
        edited = _open_in_editor(_config_to_yaml(config))
        if edited is None:
            error("Editor failed, aborting")
            sys.exit(1)
        try:
            config = yaml.safe_load(edited)
            if not isinstance(config, dict):
                raise ValueError("Config must be a YAML mapping")
        except (yaml.YAMLError, ValueError) as e:
            error(f"Invalid YAML: {e}")
            sys.exit(1)
        _print_config_preview(config)
    elif answer in ("n", "no"):
        log("Aborted.")
        sys.exit(0)

    try:
        write_config(config)
    except OSError as e:
        error(f"Failed to write {CONFIG_FILE}: {e}")
        sys.exit(1)
    success(f"Wrote {CONFIG_FILE}")
