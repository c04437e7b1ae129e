"""Tests for flowboost.flows.publish (single-branch publish state machine)."""

import pytest

from fakes import MR_URL, FakeGit, ScriptedPrompter
from flowboost.flows.publish import (
    PublishRun,
    conflict_check,
    create_merge_request,
    handle_sync_guard,
    marker_commit_message,
    publish_branch,
    push_current,
)
from flowboost.models.choices import DirtyChangesChoice, OutOfSyncChoice
from flowboost.models.git import PublishRequest
from flowboost.models.state import PublishState


def synced_git(**kwargs):
    """feature/x exists on the remote with the same commits and an upstream."""
    git = FakeGit(remote={"master": ["c0"], "feature/x": ["c0", "c1"]}, **kwargs)
    git.upstream["feature/x"] = "origin/feature/x"
    return git


def behind_git():
    git = FakeGit(remote={"master": ["c0"], "feature/x": ["c0", "someone-else"]})
    git.upstream["feature/x"] = "origin/feature/x"
    return git


class TestCleanNewBranch:
    def test_push_mr_without_prompts(self, make_context, fake_git, prompter):
        report = create_merge_request(make_context(), "master")

        assert report.pushed
        assert report.result.url == MR_URL
        assert prompter.asked == []
        push = fake_git.pushes[0]
        assert "merge_request.target=master" in push
        assert "merge_request.create" in push
        assert "merge_request.draft" not in push
        assert "--force" not in push
        assert push[-2:] == ["origin", "feature/x"]

    def test_new_branch_sets_upstream_on_push(self, make_context, fake_git):
        create_merge_request(make_context(), "master")
        assert "--set-upstream" in fake_git.pushes[0]
        assert fake_git.upstream["feature/x"] == "origin/feature/x"

    def test_no_marker_commit_for_new_branch(self, make_context, fake_git):
        create_merge_request(make_context(), "master")
        assert not any(c[0] == "commit" for c in fake_git.calls)

    def test_delete_source_for_main_target(self, make_context, fake_git):
        create_merge_request(make_context(), "master")
        assert "merge_request.remove_source_branch" in fake_git.pushes[0]

    def test_defaults_to_main_branch(self, make_context, fake_git):
        create_merge_request(make_context())
        assert "merge_request.target=master" in fake_git.pushes[0]

    def test_into_itself_refused(self, make_context):
        git = FakeGit(current="master", local={"master": ["c0"]})
        report = create_merge_request(make_context(git=git), "master")
        assert report.status == "failed"
        assert git.pushes == []


class TestTargetSettings:
    def test_draft_and_labels_from_config(self, make_context, fake_git):
        create_merge_request(make_context(), "develop")
        push = fake_git.pushes[0]
        assert "merge_request.draft" in push
        assert "merge_request.label=needs-review" in push
        assert "merge_request.label=qa" in push
        assert "merge_request.remove_source_branch" not in push

    def test_unconfigured_target_warns(self, make_context, fake_git, capsys):
        report = create_merge_request(make_context(), "staging")
        assert report.pushed
        assert "staging is not in mergeRequestOptions.branches" in capsys.readouterr().out
        assert not any(a.startswith("merge_request.label") for a in fake_git.pushes[0])


class TestExistingBranch:
    def test_synced_pushes_marker_commit_without_force(self, make_context):
        git = synced_git()
        report = create_merge_request(make_context(git=git), "master")
        assert report.pushed
        assert ["commit", "--allow-empty", "-m", marker_commit_message("master")] in git.calls
        assert "--force" not in git.pushes[0]
        assert "--set-upstream" not in git.pushes[0]

    def test_missing_upstream_is_set_before_push(self, make_context):
        git = synced_git()
        git.upstream.clear()
        create_merge_request(make_context(git=git), "master")
        set_upstream = ["branch", "--set-upstream-to=origin/feature/x", "feature/x"]
        assert git.calls.index(set_upstream) < git.calls.index(git.pushes[0])

    def test_plain_push_has_no_marker_commit(self, make_context):
        git = synced_git()
        report = push_current(make_context(git=git))
        assert report.pushed
        assert git.pushes == [["push", "origin", "feature/x"]]
        assert not any(c[0] == "commit" for c in git.calls)


class TestOutOfSync:
    def test_force_only_after_explicit_choice(self, make_context):
        git = behind_git()
        prompter = ScriptedPrompter([OutOfSyncChoice.FORCE])
        report = create_merge_request(make_context(git=git, prompts=prompter), "master")
        assert report.pushed
        assert "--force" in git.pushes[0]
        assert git.remote["feature/x"][-1].startswith(marker_commit_message("master"))

    def test_abort_leaves_repository_untouched(self, make_context):
        git = behind_git()
        prompter = ScriptedPrompter([OutOfSyncChoice.ABORT])
        report = create_merge_request(make_context(git=git, prompts=prompter), "master")
        assert report.status == "aborted"
        # only the fetch made to compare with the remote happened
        assert git.mutations == [["fetch", "origin", "feature/x"]]
        assert git.remote["feature/x"] == ["c0", "someone-else"]

    def test_diverged_prompts(self, make_context):
        git = behind_git()
        git.local["feature/x"].append("mine")
        prompter = ScriptedPrompter([OutOfSyncChoice.ABORT])
        create_merge_request(make_context(git=git, prompts=prompter), "master")
        assert len(prompter.asked) == 1

    def test_temp_branch_skips_sync_guard_and_forces(self, make_context):
        git = behind_git()
        request = PublishRequest(branch="feature/x", target_branch="develop", is_temp=True)
        report = publish_branch(make_context(git=git), request)
        assert report.pushed
        assert "--force" in git.pushes[0]
        assert not any(c[0] == "rev-list" for c in git.calls)

    def test_temp_branch_state_reads_working_tree(self, make_context):
        git = behind_git()
        git.untracked = True
        run = PublishRun(
            request=PublishRequest(branch="feature/x", target_branch="develop", is_temp=True)
        )
        assert handle_sync_guard(make_context(git=git), run) is PublishState.BUILD_OPTIONS
        assert run.repo.has_uncommitted_changes is True
        assert run.repo.exists_on_remote is True
        assert run.repo.is_synced_with_remote is True
        assert not any(c[0] in ("fetch", "rev-list") for c in git.calls)


class TestRemoteLookup:
    def test_branch_sharing_suffix_with_remote_branch_is_new(self, make_context):
        git = FakeGit(
            current="login",
            local={"master": ["c0"], "login": ["c0", "l1"]},
            remote={"master": ["c0"], "feature/login": ["c0", "other"]},
        )
        report = push_current(make_context(git=git))
        assert report.pushed
        assert not any(c[0] in ("fetch", "rev-list") for c in git.calls)
        assert "--force" not in git.pushes[0]
        assert git.remote["login"] == ["c0", "l1"]
        assert git.remote["feature/login"] == ["c0", "other"]


class TestDirtyGuard:
    def test_abort_has_no_side_effects(self, make_context, fake_git):
        fake_git.dirty = True
        prompter = ScriptedPrompter([DirtyChangesChoice.ABORT])
        report = create_merge_request(make_context(prompts=prompter), "master")
        assert report.status == "aborted"
        assert fake_git.mutations == []
        assert fake_git.dirty is True

    def test_commit_squash_then_publish(self, make_context, fake_git):
        fake_git.dirty = True
        prompter = ScriptedPrompter([DirtyChangesChoice.COMMIT_SQUASH], texts=["fix bug"])
        report = create_merge_request(make_context(prompts=prompter), "master")
        assert report.pushed
        assert fake_git.mutations[:3] == [
            ["add", "-A"],
            ["commit", "-m", "fix bug"],
            ["rebase", "-i", "mb0"],
        ]
        assert ["merge-base", "origin/master", "feature/x"] in fake_git.calls
        assert fake_git.mutations[3][0] == "push"

    def test_commit_squash_base_is_main_for_plain_push(self, make_context, fake_git):
        fake_git.dirty = True
        prompter = ScriptedPrompter([DirtyChangesChoice.COMMIT_SQUASH], texts=["wip"])
        push_current(make_context(prompts=prompter))
        assert ["merge-base", "origin/master", "feature/x"] in fake_git.calls

    def test_stash_then_publish(self, make_context, fake_git):
        fake_git.dirty = True
        prompter = ScriptedPrompter([DirtyChangesChoice.STASH])
        report = create_merge_request(make_context(prompts=prompter), "master")
        assert report.pushed
        assert fake_git.stash == ["WIP"]

    def test_commit_prompts_for_message(self, make_context, fake_git):
        fake_git.dirty = True
        prompter = ScriptedPrompter([DirtyChangesChoice.COMMIT], texts=["add tests"])
        create_merge_request(make_context(prompts=prompter), "master")
        assert ["commit", "-m", "add tests"] in fake_git.calls
        assert fake_git.interactive == []

    def test_reset_server(self, make_context):
        git = synced_git()
        git.dirty = True
        prompter = ScriptedPrompter([DirtyChangesChoice.RESET_SERVER])
        create_merge_request(make_context(git=git, prompts=prompter), "master")
        assert ["reset", "--hard", "origin/feature/x"] in git.calls


class TestFailures:
    def test_rejected_push_reports_failure(self, make_context, fake_git, capsys):
        fake_git.fail_on("push", stderr="! [remote rejected] (pre-receive hook declined)")
        report = create_merge_request(make_context(), "master")
        assert report.status == "failed"
        assert report.result is None
        assert "pre-receive hook declined" in capsys.readouterr().out

    def test_conflict_check_failure_only_warns(self, make_context, fake_git, capsys):
        fake_git.fail_on("merge-base")
        report = create_merge_request(make_context(), "master")
        assert report.pushed
        assert "Conflict pre-check skipped" in capsys.readouterr().out

    def test_push_without_url(self, make_context, fake_git, capsys):
        fake_git.push_output = "Everything up-to-date"
        report = create_merge_request(make_context(), "master")
        assert report.pushed
        assert report.result.url is None
        assert "No merge request URL" in capsys.readouterr().out

    def test_publish_options_not_reused(self, make_context, fake_git):
        ctx = make_context()
        create_merge_request(ctx, "develop")
        create_merge_request(ctx, "master")
        assert "merge_request.draft" not in fake_git.pushes[1]


class TestConflictCheckAlias:
    def test_reports_shared_files(self, make_context, fake_git, capsys):
        fake_git.diffs["origin/develop"] = ["a.py"]
        fake_git.diffs["feature/x"] = ["a.py", "b.py"]
        report = conflict_check(make_context(), "develop")
        assert report.files == ("a.py",)
        assert fake_git.mutations == []
        assert "a.py" in capsys.readouterr().out

    @pytest.mark.parametrize("target", ["", None])
    def test_defaults_to_main(self, make_context, fake_git, target):
        report = conflict_check(make_context(), target)
        assert report.target_branch == "master"
