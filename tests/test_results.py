"""Tests for flowboost.flows.results."""

import dataclasses

import pytest

from fakes import MR_URL, PUSH_OUTPUT
from flowboost.flows.results import (
    extract_merge_request_url,
    handle_result,
    is_valid_url,
    parse_push_output,
)
from flowboost.models.git import ConflictReport, MergeRequestResult


class TestExtractUrl:
    def test_gitlab_remote_message(self):
        assert extract_merge_request_url(PUSH_OUTPUT) == MR_URL

    def test_first_url_wins(self):
        output = "remote: http://a.example/1\nremote: https://b.example/2"
        assert extract_merge_request_url(output) == "http://a.example/1"

    @pytest.mark.parametrize("output", ["", "Everything up-to-date", None])
    def test_no_url(self, output):
        assert extract_merge_request_url(output) is None

    def test_parse_keeps_raw_output(self):
        result = parse_push_output(PUSH_OUTPUT)
        assert result.raw_output == PUSH_OUTPUT
        assert result.url == MR_URL


class TestIsValidUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            (MR_URL, True),
            ("http://localhost:8080/mr/1", True),
            ("https://", False),
            ("ftp://example.com/x", False),
        ],
    )
    def test_validation(self, url, expected):
        assert is_valid_url(url) is expected


class TestHandleResult:
    def test_opens_browser_when_enabled(self, make_context, flow_config, mocker):
        browser = mocker.patch("flowboost.flows.results.webbrowser.open")
        ctx = make_context(config=dataclasses.replace(flow_config, open_in_browser=True))
        handle_result(ctx, "feature/x", "master", MergeRequestResult("", MR_URL))
        browser.assert_called_once_with(MR_URL)

    def test_browser_disabled(self, make_context, mocker, capsys):
        browser = mocker.patch("flowboost.flows.results.webbrowser.open")
        handle_result(make_context(), "feature/x", "master", MergeRequestResult("", MR_URL))
        browser.assert_not_called()
        assert MR_URL in capsys.readouterr().out

    def test_invalid_url_not_opened(self, make_context, flow_config, mocker, capsys):
        browser = mocker.patch("flowboost.flows.results.webbrowser.open")
        ctx = make_context(config=dataclasses.replace(flow_config, open_in_browser=True))
        handle_result(ctx, "feature/x", "master", MergeRequestResult("", "https://"))
        browser.assert_not_called()
        assert "invalid URL" in capsys.readouterr().out

    def test_missing_url_warns_only_with_target(self, make_context, capsys):
        handle_result(make_context(), "feature/x", None, MergeRequestResult(""))
        assert "No merge request URL" not in capsys.readouterr().out
        handle_result(make_context(), "feature/x", "master", MergeRequestResult(""))
        assert "No merge request URL" in capsys.readouterr().out

    def test_offers_notification_with_context(self, make_context, mocker):
        ctx = make_context()
        ctx.notifier = mocker.MagicMock()
        conflicts = ConflictReport("feature/x", "master", "mb0", ("a.py",))
        handle_result(ctx, "feature/x", "master", MergeRequestResult("", MR_URL), conflicts)
        ctx.notifier.offer_notification.assert_called_once_with(
            "New merge request: feature/x -> master",
            {
                "branch": "feature/x",
                "target": "master",
                "url": MR_URL,
                "potential_conflicts": ["a.py"],
            },
        )

    def test_no_notification_for_plain_push(self, make_context, mocker):
        ctx = make_context()
        ctx.notifier = mocker.MagicMock()
        handle_result(ctx, "feature/x", None, MergeRequestResult("", MR_URL))
        ctx.notifier.offer_notification.assert_not_called()
