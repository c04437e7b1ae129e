"""Branch name wizard driven by branchesOptions.namingConventions."""

import re
from typing import Optional

from flowboost.errors import InvalidBranchState
from flowboost.models.config import BranchConvention, FlowConfig
from flowboost.ui.prompts import Prompter

PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")


def extract_placeholders(template: str) -> list[str]:
    """Placeholder names in template order, e.g. ['ticket', 'description']."""
    return PLACEHOLDER_RE.findall(template)


def render_branch_name(template: str, values: dict[str, str]) -> str:
    """Substitute each ${name} with values[name]."""
    return PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def validate_branch_name(name: str, convention: BranchConvention) -> None:
    if convention.final_validation_regex and not re.search(
        convention.final_validation_regex, name
    ):
        raise InvalidBranchState(
            f'Branch name "{name}" does not match the required format '
            f"({convention.final_validation_regex})",
            branch=name,
        )


def ask_for_branch_name(
    prompter: Prompter, config: FlowConfig
) -> tuple[BranchConvention, str]:
    """Ask for the branch type, then each placeholder. Returns (convention, name)."""
    if not config.conventions:
        raise InvalidBranchState("No branch naming conventions configured")

    branch_type = prompter.pick(
        [c.type for c in config.conventions], "Select the type of branch you want to create:"
    )
    convention = config.convention(branch_type)
    assert convention is not None

    values: dict[str, str] = {}
    for placeholder in extract_placeholders(convention.template):
        if placeholder in values:
            continue
        values[placeholder] = prompter.ask_text(
            f"Enter the {placeholder} for your branch:", convention.pattern_for(placeholder)
        )

    name = render_branch_name(convention.template, values)
    validate_branch_name(name, convention)
    return convention, name


def resolve_base_branch(
    convention: BranchConvention, config: FlowConfig, requested: Optional[str] = None
) -> str:
    """Explicit argument wins, then the convention's default, then the main branch."""
    return requested or convention.default_base_branch or config.main_branch
