"""Slack Web API client."""

import json
import os
import urllib.error
import urllib.request
from typing import Optional

from flowboost.auth import get_token
from flowboost.ui.output import error

SLACK_API_URL = "https://slack.com/api"


def _get_auth_header() -> Optional[str]:
    """Get authorization header value from env var or stored OAuth token."""
    token = os.environ.get("SLACK_TOKEN") or get_token()
    if token:
        return f"Bearer {token}"
    return None


def slack_api(method: str, payload: dict) -> Optional[dict]:
    """POST a JSON payload to a Slack Web API method. Returns None on error."""
    auth = _get_auth_header()
    if not auth:
        error("Not authenticated with Slack. Run `flowboost login` or set SLACK_TOKEN.")
        return None

    data = json.dumps(payload).encode()
    req = urllib.request.Request(
        f"{SLACK_API_URL}/{method}",
        data=data,
        headers={"Authorization": auth, "Content-Type": "application/json; charset=utf-8"},
    )
    try:
        with urllib.request.urlopen(
            req, timeout=30
        ) as resp:  # nosemgrep: dynamic-urllib-use-detected
            result = json.loads(resp.read())
            if not result.get("ok"):
                error(f"Slack API error ({method}): {result.get('error', 'unknown')}")
                return None
            return result  # type: ignore[no-any-return]
    except urllib.error.HTTPError as e:
        error(f"Slack API HTTP {e.code}: {e.reason}")
        return None
    except urllib.error.URLError as e:
        error(f"Slack API connection error: {e.reason}")
        return None
    except Exception as e:
        error(f"Slack API error: {e}")
        return None


def post_message(channel: str, text: str) -> bool:
    """Post a message to a channel. Returns True if Slack accepted it."""
    return slack_api("chat.postMessage", {"channel": channel, "text": text}) is not None
