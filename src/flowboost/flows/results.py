"""Push result handling: merge-request URL extraction, browser, notification."""

import re
import webbrowser
from typing import Optional
from urllib.parse import urlparse

from flowboost.flows.context import FlowContext
from flowboost.models.git import ConflictReport, MergeRequestResult
from flowboost.ui.output import GREEN, NC, hyperlink, log, success, warn

URL_PATTERN = re.compile(r"http[s]?://\S+")


def extract_merge_request_url(output: str) -> Optional[str]:
    """First URL in git push output (GitLab prints it in the remote messages)."""
    match = URL_PATTERN.search(output or "")
    return match.group(0) if match else None


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_push_output(output: str) -> MergeRequestResult:
    return MergeRequestResult(raw_output=output, url=extract_merge_request_url(output))


def handle_result(
    ctx: FlowContext,
    branch: str,
    target: Optional[str],
    result: MergeRequestResult,
    conflicts: Optional[ConflictReport] = None,
) -> None:
    """Surface the push result: link, browser, optional notification."""
    if not result.url:
        if target:
            warn("No merge request URL found in the push output.")
        success(f"Pushed {branch}")
        return

    link = hyperlink(result.url, result.url)
    success(f"Pushed {branch}: {GREEN}{link}{NC}")

    if not is_valid_url(result.url):
        warn(f"Not opening invalid URL: {result.url}")
    elif ctx.config.open_in_browser:
        log("Opening merge request in your browser...")
        webbrowser.open(result.url)

    if ctx.notifier is not None and target:
        ctx.notifier.offer_notification(
            f"New merge request: {branch} -> {target}",
            {
                "branch": branch,
                "target": target,
                "url": result.url,
                "potential_conflicts": list(conflicts.files) if conflicts else [],
            },
        )
