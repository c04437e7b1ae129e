"""Merge-request notifications.

Fire-and-forget: a failed notification is reported on the console and never
changes the outcome of the flow that produced it.
"""

import os
from typing import Any, Mapping

from flowboost.auth import get_token, run_login_flow
from flowboost.clients.slack import post_message
from flowboost.models.config import NotificationSettings
from flowboost.ui.output import log, success, warn
from flowboost.ui.prompts import Prompter


def format_notification(message: str, context: Mapping[str, Any]) -> str:
    """Render the message followed by one line per non-empty context entry."""
    lines = [message]
    for key, value in context.items():
        if value in (None, "", (), []):
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        lines.append(f"- {key.replace('_', ' ').capitalize()}: {value}")
    return "\n".join(lines)


class NotificationDispatcher:
    """Posts merge-request notifications to the configured Slack channel."""

    def __init__(self, settings: NotificationSettings, prompter: Prompter):
        self.settings = settings
        self.prompter = prompter

    def _ensure_authenticated(self) -> bool:
        if os.environ.get("SLACK_TOKEN") or get_token():
            return True
        log("No Slack authentication found.")
        if not self.prompter.confirm(
            "Log in to Slack now?", yes_label="Log in via browser", no_label="Skip notification"
        ):
            return False
        try:
            return run_login_flow(self.prompter)
        except OSError as e:
            warn(f"Slack login failed: {e}")
            return False

    def send_notification(self, message: str, context: Mapping[str, Any]) -> None:
        if not self.settings.channel:
            warn("notifications.slack.channel is not set, skipping notification.")
            return
        if not self._ensure_authenticated():
            warn("Notification not sent.")
            return
        if post_message(self.settings.channel, format_notification(message, context)):
            success(f"Notification sent to {self.settings.channel}")
        else:
            warn("Notification not sent.")

    def offer_notification(self, message: str, context: Mapping[str, Any]) -> bool:
        """Ask before sending. Returns True if the user agreed."""
        if not self.prompter.confirm(
            f"Send a notification to {self.settings.channel or 'Slack'}?",
            yes_label="Send notification",
            no_label="Skip",
        ):
            return False
        self.send_notification(message, context)
        return True
