"""OAuth browser login for Slack (user token with chat:write)."""

import json
import os
import secrets
import urllib.error
import urllib.request
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from flowboost.ui.output import error, log, warn
from flowboost.ui.prompts import Prompter
from flowboost.utils.retry import retry_until_present

AUTH_URL = "https://slack.com/oauth/v2/authorize"
TOKEN_URL = "https://slack.com/api/oauth.v2.access"
REDIRECT_PORT = 19285
REDIRECT_URI = f"http://localhost:{REDIRECT_PORT}/oauth/callback"
USER_SCOPES = "chat:write"
CALLBACK_TIMEOUT = 120

# One re-prompt for missing client credentials, then give up
CREDENTIAL_ATTEMPTS = 2

TOKEN_DIR = Path.home() / ".config" / "flowboost"
TOKEN_FILE = TOKEN_DIR / "slack.json"


def _save_tokens(data: dict) -> None:
    """Save credentials to disk with restricted permissions."""
    TOKEN_DIR.mkdir(parents=True, exist_ok=True)
    fd = os.open(TOKEN_FILE, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        os.write(fd, json.dumps(data).encode())
    finally:
        os.close(fd)


def _load_tokens() -> dict:
    if not TOKEN_FILE.exists():
        return {}
    try:
        data = json.loads(TOKEN_FILE.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _update_tokens(**values: str) -> None:
    data = _load_tokens()
    data.update(values)
    _save_tokens(data)


def _stored_client_credentials() -> Optional[tuple[str, str]]:
    data = _load_tokens()
    client_id = data.get("client_id")
    client_secret = data.get("client_secret")
    if client_id and client_secret:
        return client_id, client_secret
    return None


def get_client_credentials(prompter: Prompter) -> Optional[tuple[str, str]]:
    """Stored Slack app credentials, asking the user once if they are missing."""

    def ask(attempt: int) -> None:
        log("No Slack app credentials stored.")
        client_id = prompter.ask_text("Enter your Slack Client ID:")
        client_secret = prompter.ask_text("Enter your Slack Client Secret:", secret=True)
        _update_tokens(client_id=client_id, client_secret=client_secret)

    return retry_until_present(_stored_client_credentials, CREDENTIAL_ATTEMPTS, between=ask)


def _exchange_code(code: str, client_id: str, client_secret: str) -> Optional[dict]:
    """Exchange authorization code for a user token."""
    body = urlencode(
        {
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": REDIRECT_URI,
        }
    ).encode()

    req = urllib.request.Request(
        TOKEN_URL,
        data=body,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    try:
        with urllib.request.urlopen(
            req, timeout=30
        ) as resp:  # nosemgrep: dynamic-urllib-use-detected
            return json.loads(resp.read())
    except (urllib.error.URLError, json.JSONDecodeError) as e:
        error(f"Token exchange failed: {e}")
        return None


class _CallbackHandler(BaseHTTPRequestHandler):
    """HTTP handler that captures the OAuth callback code."""

    auth_code: Optional[str] = None
    error_msg: Optional[str] = None
    expected_state: Optional[str] = None

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        if parsed.path != "/oauth/callback":
            self.send_error(404)
            return

        params = parse_qs(parsed.query)

        if "error" in params:
            _CallbackHandler.error_msg = params["error"][0]
            self._respond("Authentication failed. You can close this tab.")
            return

        state = params.get("state", [None])[0]
        if state != _CallbackHandler.expected_state:
            _CallbackHandler.error_msg = "State mismatch, possible CSRF"
            self._respond("Authentication failed. You can close this tab.")
            return

        code = params.get("code", [None])[0]
        if not code:
            _CallbackHandler.error_msg = "No authorization code received"
            self._respond("Authentication failed. You can close this tab.")
            return

        _CallbackHandler.auth_code = code
        self._respond("Authentication successful. You can close this tab.")

    def _respond(self, message: str) -> None:
        html = f"<html><body><h2>{message}</h2></body></html>"
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.end_headers()
        self.wfile.write(html.encode())

    def log_message(self, format: str, *args: object) -> None:
        pass


def _run_callback_server(expected_state: str) -> Optional[str]:
    """Start local server, wait for one callback, return auth code."""
    _CallbackHandler.auth_code = None
    _CallbackHandler.error_msg = None
    _CallbackHandler.expected_state = expected_state

    server = HTTPServer(("localhost", REDIRECT_PORT), _CallbackHandler)
    server.timeout = CALLBACK_TIMEOUT
    try:
        server.handle_request()
    finally:
        server.server_close()

    if _CallbackHandler.error_msg:
        error(f"OAuth error: {_CallbackHandler.error_msg}")
        return None

    return _CallbackHandler.auth_code


def run_login_flow(prompter: Prompter) -> bool:
    """Run the Slack OAuth flow and store the user token. Returns True on success."""
    credentials = get_client_credentials(prompter)
    if not credentials:
        error("Slack Client ID and Secret are required to log in.")
        return False
    client_id, client_secret = credentials

    state = secrets.token_urlsafe(32)
    params = urlencode(
        {
            "client_id": client_id,
            "user_scope": USER_SCOPES,
            "redirect_uri": REDIRECT_URI,
            "state": state,
        }
    )
    auth_url = f"{AUTH_URL}?{params}"

    log("Opening browser for Slack login...")
    webbrowser.open(auth_url)
    log(f"Waiting for authorization (timeout: {CALLBACK_TIMEOUT}s)...")

    code = _run_callback_server(state)
    if not code:
        return False

    token_data = _exchange_code(code, client_id, client_secret)
    if not token_data or not token_data.get("ok"):
        reason = (token_data or {}).get("error", "no response")
        error(f"Failed to exchange code for token: {reason}")
        return False

    token = (token_data.get("authed_user") or {}).get("access_token")
    if not token:
        warn("Slack did not return a user token. Check the app's user scopes.")
        return False

    _update_tokens(access_token=token)
    return True


def get_token() -> Optional[str]:
    """Stored Slack user token, or None."""
    return _load_tokens().get("access_token") or None


def clear_tokens() -> None:
    """Delete stored Slack credentials and token."""
    if TOKEN_FILE.exists():
        TOKEN_FILE.unlink()
