"""Config loading with layered overrides.

Priority chain: bundled defaults < ~/.config/flowboost/config.yaml < .flowboost/config.yaml
Deep merge: dicts merge recursively, lists/scalars replace.

The merged dict is validated once and frozen into a FlowConfig that the CLI
passes to every flow; nothing re-reads configuration later.
"""

import importlib.resources
from pathlib import Path

import yaml

from flowboost.config.utils import deep_merge, load_yaml, lookup, missing_paths
from flowboost.errors import ConfigurationInvalid
from flowboost.models.config import (
    BranchConvention,
    BranchSettings,
    FlowConfig,
    NotificationSettings,
)

GLOBAL_CONFIG = Path.home() / ".config" / "flowboost" / "config.yaml"
PROJECT_CONFIG = Path(".flowboost") / "config.yaml"

REQUIRED_KEYS = [
    "mergeRequestOptions.mainBranch",
    "mergeRequestOptions.branches",
    "branchesOptions.namingConventions",
]


def _load_defaults() -> dict:
    """Load bundled default config."""
    try:
        files = importlib.resources.files("flowboost")
        config_path = files / "defaults" / "config.yaml"
        content = config_path.read_text()
        return yaml.safe_load(content)
    except (FileNotFoundError, TypeError):
        dev_path = Path(__file__).parent.parent / "defaults" / "config.yaml"
        if dev_path.exists():
            with open(dev_path) as f:
                return yaml.safe_load(f)
        raise FileNotFoundError("Could not find defaults/config.yaml")


def load_config() -> tuple[dict, list[str]]:
    """Load config with layered overrides: defaults < global < project.

    Returns the merged dict and the list of sources that contributed to it.
    """
    sources = ["defaults"]
    result = _load_defaults()

    global_overrides = load_yaml(GLOBAL_CONFIG)
    if global_overrides:
        result = deep_merge(result, global_overrides)
        sources.append(str(GLOBAL_CONFIG))

    project_overrides = load_yaml(PROJECT_CONFIG)
    if project_overrides:
        result = deep_merge(result, project_overrides)
        sources.append(str(PROJECT_CONFIG))

    return result, sources


def validate_config(raw: dict) -> list[str]:
    """Return every missing required path (empty list when valid)."""
    missing = missing_paths(raw, REQUIRED_KEYS)

    branches = lookup(raw, "mergeRequestOptions.branches")
    if isinstance(branches, list):
        for i, branch in enumerate(branches):
            if not isinstance(branch, dict) or not branch.get("name"):
                missing.append(f"mergeRequestOptions.branches[{i}].name")
    elif branches:
        missing.append("mergeRequestOptions.branches[] (expected a list)")

    conventions = lookup(raw, "branchesOptions.namingConventions")
    if isinstance(conventions, dict):
        for branch_type, convention in conventions.items():
            if not isinstance(convention, dict) or not convention.get("template"):
                missing.append(f"branchesOptions.namingConventions.{branch_type}.template")
    elif conventions:
        missing.append("branchesOptions.namingConventions.<type> (expected a mapping)")

    return missing


def build_flow_config(raw: dict, sources: tuple[str, ...] = ()) -> FlowConfig:
    """Validate the merged dict and freeze it. Raises ConfigurationInvalid."""
    missing = validate_config(raw)
    if missing:
        raise ConfigurationInvalid(missing)

    mr = raw["mergeRequestOptions"]
    branches = tuple(
        BranchSettings(
            name=str(b["name"]),
            is_draft=bool(b.get("isDraftPR", False)),
            required_labels=tuple(str(label) for label in b.get("requiredLabels") or ()),
        )
        for b in mr["branches"]
    )
    conventions = tuple(
        BranchConvention(
            type=str(branch_type),
            template=str(c["template"]),
            placeholder_validation=tuple(
                (str(k), str(v)) for k, v in (c.get("placeHoldersValidation") or {}).items()
            ),
            final_validation_regex=c.get("finalValidationRegex") or None,
            default_base_branch=c.get("defaultBaseBranch") or None,
        )
        for branch_type, c in raw["branchesOptions"]["namingConventions"].items()
    )
    slack = lookup(raw, "notifications.slack", {}) or {}

    return FlowConfig(
        main_branch=str(mr["mainBranch"]),
        branches=branches,
        remote=str(raw.get("remote") or "origin"),
        delete_after_main_merge=bool(mr.get("setToDeleteBranchAfterMainMerge", False)),
        allow_temp_branches=bool(mr.get("allowToCreateTempBranches", False)),
        open_in_browser=bool(mr.get("openInBrowser", True)),
        conventions=conventions,
        notifications=NotificationSettings(
            enabled=bool(slack.get("enabled", False)),
            channel=str(slack.get("channel") or ""),
        ),
        sources=tuple(sources),
    )


def load_flow_config() -> FlowConfig:
    """Load, merge, validate. Called once per invocation."""
    raw, sources = load_config()
    return build_flow_config(raw, tuple(sources))
