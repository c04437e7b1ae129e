"""API clients."""

from flowboost.clients.slack import post_message, slack_api

__all__ = [
    # Slack
    "slack_api",
    "post_message",
]
