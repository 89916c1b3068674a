"""End-to-end reconciliation against real repositories."""

import subprocess

import pytest

from branchsync.exceptions import RemoteNotConfiguredError
from branchsync.reconcile import (
    ActionStatus,
    ActiveBranchPolicy,
    BranchState,
    ReconcileOptions,
    ReconcileReport,
    reconcile,
)
from branchsync.repository import GitRepository
from tests.conftest import GitRemoteSetup, run_git


def _reconcile(setup: GitRemoteSetup, **options: object) -> ReconcileReport:
    with GitRepository(setup.clone) as repo:
        return reconcile(repo, ReconcileOptions(**options))  # pyright: ignore[reportArgumentType]


class TestReconcileAgainstGit:
    def test_full_pass(self, git_remote: GitRemoteSetup) -> None:
        clone = git_remote.clone
        _ = git_remote.create_remote_branch("feature")
        _ = git_remote.create_remote_branch("stale")
        run_git(clone, "fetch", "-q", "origin")
        run_git(clone, "branch", "-q", "feature", "origin/feature")
        run_git(clone, "branch", "-q", "stale", "origin/stale")

        feature_tip = git_remote.commit("feature work", branch="feature")
        git_remote.delete_remote_branch("stale")
        release_tip = git_remote.create_remote_branch("release")

        report = _reconcile(git_remote)

        states = {o.name: o.state for o in report.outcomes}
        assert states == {
            "stale": BranchState.ORPHANED_LOCAL,
            "feature": BranchState.FAST_FORWARDABLE,
            "main": BranchState.SYNCED,
            "release": BranchState.MISSING_LOCAL,
        }
        assert report.fetch is not None
        assert "stale" in report.fetch.pruned
        assert git_remote.clone_branches() == {"main", "feature", "release"}
        assert git_remote.clone_sha("feature") == feature_tip
        assert git_remote.clone_sha("release") == release_tip
        assert run_git(clone, "symbolic-ref", "HEAD") == "refs/heads/main"

    def test_second_pass_changes_nothing(self, git_remote: GitRemoteSetup) -> None:
        _ = git_remote.create_remote_branch("release")
        _ = _reconcile(git_remote)

        report = _reconcile(git_remote)

        assert report.mutations == ()
        assert {o.state for o in report.outcomes} == {BranchState.SYNCED}

    def test_dry_run_leaves_refs_alone(self, git_remote: GitRemoteSetup) -> None:
        run_git(git_remote.clone, "branch", "stale")
        _ = git_remote.create_remote_branch("release")

        report = _reconcile(git_remote, dry_run=True)

        assert {o.status for o in report.outcomes if o.name != "main"} == {
            ActionStatus.PLANNED
        }
        assert git_remote.clone_branches() == {"main", "stale"}

    def test_active_branch_fast_forwarded_with_worktree(
        self, git_remote: GitRemoteSetup
    ) -> None:
        tip = git_remote.commit("upstream work")

        report = _reconcile(git_remote)

        (outcome,) = report.outcomes
        assert outcome.status is ActionStatus.APPLIED
        assert git_remote.clone_sha("HEAD") == tip
        assert (git_remote.clone / "main.txt").read_text() == "upstream work\n"

    def test_dirty_active_branch_is_skipped(self, git_remote: GitRemoteSetup) -> None:
        before = git_remote.clone_sha("main")
        _ = git_remote.commit("upstream work")
        (git_remote.clone / "README.md").write_text("local edit\n")

        report = _reconcile(git_remote)

        (outcome,) = report.outcomes
        assert outcome.status is ActionStatus.SKIPPED
        assert git_remote.clone_sha("main") == before
        assert (git_remote.clone / "README.md").read_text() == "local edit\n"

    def test_skip_policy_leaves_active_branch(
        self, git_remote: GitRemoteSetup
    ) -> None:
        before = git_remote.clone_sha("main")
        _ = git_remote.commit("upstream work")

        report = _reconcile(git_remote, active_branch=ActiveBranchPolicy.SKIP)

        assert report.outcomes[0].status is ActionStatus.SKIPPED
        assert git_remote.clone_sha("main") == before

    def test_diverged_branch_untouched(self, git_remote: GitRemoteSetup) -> None:
        _ = git_remote.commit("upstream work")
        run_git(git_remote.clone, "commit", "-q", "--allow-empty", "-m", "local")
        local_tip = git_remote.clone_sha("main")

        report = _reconcile(git_remote)

        (outcome,) = report.outcomes
        assert outcome.state is BranchState.DIVERGED
        assert outcome.status is ActionStatus.NOT_REQUIRED
        assert git_remote.clone_sha("main") == local_tip

    def test_locked_ref_fails_only_that_branch(
        self, git_remote: GitRemoteSetup
    ) -> None:
        run_git(git_remote.clone, "branch", "stale")
        run_git(git_remote.clone, "branch", "other")
        (git_remote.clone / ".git" / "refs" / "heads" / "stale.lock").touch()

        report = _reconcile(git_remote)

        statuses = {o.name: o.status for o in report.outcomes}
        assert statuses["stale"] is ActionStatus.FAILED
        assert statuses["other"] is ActionStatus.APPLIED
        assert git_remote.clone_branches() == {"main", "stale"}

    def test_detached_head_preserved(self, git_remote: GitRemoteSetup) -> None:
        sha = git_remote.clone_sha("main")
        run_git(git_remote.clone, "checkout", "-q", "--detach", sha)
        tip = git_remote.commit("upstream work")

        report = _reconcile(git_remote)

        assert report.head.is_detached
        assert git_remote.clone_sha("main") == tip
        assert git_remote.clone_sha("HEAD") == sha

    @pytest.mark.parametrize("fetch", [True, False])
    def test_unknown_remote_changes_nothing(
        self, git_remote: GitRemoteSetup, fetch: bool  # noqa: FBT001
    ) -> None:
        run_git(git_remote.clone, "branch", "stale")

        with pytest.raises(RemoteNotConfiguredError):
            _ = _reconcile(git_remote, remote="upstrem", fetch=fetch)

        assert git_remote.clone_branches() == {"main", "stale"}

    def test_ref_name_clash_fails_only_that_branch(
        self, git_remote: GitRemoteSetup
    ) -> None:
        run_git(git_remote.clone, "checkout", "-q", "-b", "feature")
        _ = git_remote.create_remote_branch("feature/a")
        zzz_tip = git_remote.create_remote_branch("zzz")

        report = _reconcile(git_remote)

        statuses = {o.name: o.status for o in report.outcomes}
        assert statuses == {
            "feature": ActionStatus.SKIPPED,
            "feature/a": ActionStatus.FAILED,
            "main": ActionStatus.NOT_REQUIRED,
            "zzz": ActionStatus.APPLIED,
        }
        assert git_remote.clone_branches() == {"main", "feature", "zzz"}
        assert git_remote.clone_sha("zzz") == zzz_tip

    def test_deleted_branch_loses_tracking_config(
        self, git_remote: GitRemoteSetup
    ) -> None:
        _ = git_remote.create_remote_branch("release")
        _ = _reconcile(git_remote)
        assert run_git(git_remote.clone, "config", "branch.release.remote") == "origin"
        git_remote.delete_remote_branch("release")

        report = _reconcile(git_remote)

        outcome = report.get("release")
        assert outcome is not None
        assert outcome.status is ActionStatus.APPLIED
        with pytest.raises(subprocess.CalledProcessError):
            _ = run_git(git_remote.clone, "config", "--get-regexp", r"^branch\.release\.")
