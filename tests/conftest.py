"""Shared test fixtures."""

import subprocess
from typing import Optional

import pytest

from fakes import FakeGit, ScriptedPrompter
from flowboost.flows.context import build_context
from flowboost.models.config import (
    BranchConvention,
    BranchSettings,
    FlowConfig,
    NotificationSettings,
)


@pytest.fixture
def flow_config():
    return FlowConfig(
        main_branch="master",
        branches=(
            BranchSettings("master"),
            BranchSettings("develop", is_draft=True, required_labels=("needs-review", "qa")),
            BranchSettings("release/1.0"),
        ),
        delete_after_main_merge=True,
        allow_temp_branches=True,
        open_in_browser=False,
        conventions=(
            BranchConvention(
                type="feature",
                template="feature/${ticket}-${description}",
                placeholder_validation=(
                    ("ticket", r"^[A-Z]+-\d+$"),
                    ("description", r"^[a-z0-9-]+$"),
                ),
                final_validation_regex=r"^feature/[A-Z]+-\d+-[a-z0-9-]+$",
                default_base_branch="develop",
            ),
            BranchConvention(type="hotfix", template="hotfix/${description}"),
        ),
        notifications=NotificationSettings(enabled=False),
    )


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def make_context(flow_config, fake_git, prompter):
    """Build a FlowContext over FakeGit; override pieces per test."""

    def _make(
        config: Optional[FlowConfig] = None,
        git: Optional[FakeGit] = None,
        prompts: Optional[ScriptedPrompter] = None,
    ):
        return build_context(config or flow_config, git or fake_git, prompts or prompter)

    return _make


@pytest.fixture
def mock_subprocess(mocker):
    """Mock subprocess.run returning success by default."""
    mock = mocker.patch("subprocess.run")
    mock.return_value = subprocess.CompletedProcess([], 0, stdout="", stderr="")
    return mock


@pytest.fixture
def isolated_auth(tmp_path, monkeypatch):
    """Point Slack credential storage at a temp dir."""
    import flowboost.auth as auth_mod

    monkeypatch.setattr(auth_mod, "TOKEN_DIR", tmp_path)
    monkeypatch.setattr(auth_mod, "TOKEN_FILE", tmp_path / "slack.json")
    monkeypatch.delenv("SLACK_TOKEN", raising=False)
    return tmp_path / "slack.json"
