"""Collaborators shared by every flow in one invocation."""

from dataclasses import dataclass
from typing import Optional

from flowboost.flows.notify import NotificationDispatcher
from flowboost.git.actions import Action, ActionExecutor
from flowboost.git.gateway import GitGateway
from flowboost.git.queries import RepoQueries
from flowboost.models.config import FlowConfig
from flowboost.ui.prompts import Prompter, TerminalPrompter


@dataclass
class FlowContext:
    config: FlowConfig
    git: GitGateway
    queries: RepoQueries
    actions: ActionExecutor
    prompter: Prompter
    notifier: Optional[NotificationDispatcher] = None
    debug: bool = False

    def run(self, action: Action) -> None:
        self.actions.execute(action)


def build_context(
    config: FlowConfig,
    gateway: GitGateway,
    prompter: Optional[Prompter] = None,
    debug: bool = False,
) -> FlowContext:
    prompter = prompter or TerminalPrompter()
    queries = RepoQueries(gateway, remote=config.remote)
    notifier = (
        NotificationDispatcher(config.notifications, prompter)
        if config.notifications.enabled
        else None
    )
    return FlowContext(
        config=config,
        git=gateway,
        queries=queries,
        actions=ActionExecutor(gateway, queries, prompter),
        prompter=prompter,
        notifier=notifier,
        debug=debug,
    )
