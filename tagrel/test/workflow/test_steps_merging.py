"""Tests for tagrel.workflow.steps.merging."""

from __future__ import annotations

from pathlib import Path

from tagrel.core.config import Config
from tagrel.core.result import Err, Ok
from tagrel.test.fakes import FakeGit, FakePrompter, conflicted_status, make_ctx
from tagrel.workflow.engine import StepEngine, Workflow
from tagrel.workflow.outcome import DONE, Decision, Fatal, Recoverable
from tagrel.workflow.scratch import REBASE_PLAN_FILE
from tagrel.workflow.state import Dependency, WorkflowState
from tagrel.workflow.steps import merging

CONFLICTED_PACKAGE = """{
  "name": "@lk/web",
  "dependencies": {
<<<<<<< HEAD
    "@lk/core": "1.0.0",
    "@lk/ui": "2.0.0"
=======
    "@lk/core": "1.1.0-login.0",
    "@lk/ui": "2.1.0"
>>>>>>> 1a2b3c4
  }
}
"""


class TestFetchAndMerge:
    """fetch_upstream and the merge steps."""

    def test_fetch(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        assert merging.fetch_upstream(WorkflowState(), h.ctx) == DONE
        assert h.git.called("fetch") == [("fetch", "upstream")]

    def test_fetch_failure_advises(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("fetch", "fatal: 'upstream' does not appear to be a git repository")
        outcome = merging.fetch_upstream(WorkflowState(), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "fetch_upstream"

    def test_merges(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        merging.merge_upstream_master(WorkflowState(), h.ctx)
        merging.merge_upstream_develop(WorkflowState(), h.ctx)
        merging.merge_upstream_develop(WorkflowState(has_develop_branch=True), h.ctx)
        merging.merge_upstream_branch(WorkflowState(branch="feature-login"), h.ctx)
        merging.merge_master_into_develop(WorkflowState(has_develop_branch=True), h.ctx)
        merging.merge_promotion_branch(WorkflowState(promote="v1.1.0-login.0"), h.ctx)
        assert h.git.called("merge") == [
            ("merge", "upstream/master", True),
            ("merge", "upstream/develop", True),
            ("merge", "upstream/feature-login", True),
            ("merge", "master", False),
            ("merge", "promote-release-v1.1.0-login.0", False),
        ]

    def test_merge_master_into_develop_failure(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("merge", "CONFLICT (content): Merge conflict in CHANGELOG.md")
        outcome = merging.merge_master_into_develop(WorkflowState(has_develop_branch=True), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "git_merge_develop_with_master"

    def test_merge_no_ff_status(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState()
        merging.merge_upstream_master_no_ff(state, h.ctx)
        assert state.status == "merged"
        assert h.git.called("merge") == [("merge", "upstream/master", False)]

    def test_custom_remote_names(self, tmp_path: Path) -> None:
        config = Config.from_dict({"remotes": {"upstream": "lk"}, "branches": {"master": "main"}})
        h = make_ctx(tmp_path, config=config)
        merging.merge_upstream_master(WorkflowState(), h.ctx)
        assert h.git.called("merge") == [("merge", "lk/main", True)]


class TestRebase:
    """Rebase steps."""

    def test_rebase_targets(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        merging.rebase_upstream_master(WorkflowState(), h.ctx)
        merging.rebase_upstream_develop(WorkflowState(), h.ctx)
        merging.rebase_upstream_base_branch(WorkflowState(has_develop_branch=True), h.ctx)
        merging.rebase_upstream_branch(WorkflowState(branch="feature-login"), h.ctx)
        merging.rebase_upstream_branch(WorkflowState(branch="feature-login", dev_branch="release-2"), h.ctx)
        assert [c[1] for c in h.git.called("rebase")] == [
            "upstream/master",
            "upstream/develop",
            "upstream/develop",
            "upstream/feature-login",
            "upstream/release-2",
        ]

    def test_rebase_failure(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("rebase", "error: could not apply 1a2b3c4")
        outcome = merging.rebase_upstream_master(WorkflowState(), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "git_rebase_upstream_base"


class TestConflictFlag:
    """rebase_upstream_base_with_conflict_flag and detect_package_json_conflict."""

    def test_clean_rebase(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(conflict=True)
        assert merging.rebase_upstream_base_with_conflict_flag(state, h.ctx) == DONE
        assert state.conflict is False

    def test_package_json_conflict_continues(self, tmp_path: Path) -> None:
        git = FakeGit(status=conflicted_status("package.json"))
        git.fail("rebase", "CONFLICT (content): Merge conflict in package.json")
        h = make_ctx(tmp_path, git=git)
        state = WorkflowState()
        outcome = merging.rebase_upstream_base_with_conflict_flag(state, h.ctx)
        assert isinstance(outcome, Recoverable)
        assert outcome.error.kind == "merge_conflict"
        assert outcome.recover is not None
        assert outcome.recover(state) is Decision.CONTINUE
        assert state.conflict is True
        assert state.rebase_in_progress is True

    def test_other_conflict_aborts(self, tmp_path: Path) -> None:
        git = FakeGit(status=conflicted_status("src/index.js"))
        git.fail("rebase", "CONFLICT (content): Merge conflict in src/index.js")
        h = make_ctx(tmp_path, git=git)
        state = WorkflowState()
        outcome = merging.rebase_upstream_base_with_conflict_flag(state, h.ctx)
        assert isinstance(outcome, Recoverable)
        assert outcome.recover is not None
        assert outcome.recover(state) is Decision.ABORT
        assert state.conflict is False
        assert h.console.has_error()

    def test_detect(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, git=FakeGit(status=conflicted_status()))
        state = WorkflowState()
        merging.detect_package_json_conflict(state, h.ctx)
        assert state.conflict is True
        assert state.rebase_in_progress is True


class TestResolvePackageJson:
    """resolve_package_json_conflicts."""

    def test_skipped_without_conflict(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        assert merging.resolve_package_json_conflicts(WorkflowState(), h.ctx) == DONE

    def test_missing_file(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        outcome = merging.resolve_package_json_conflicts(WorkflowState(conflict=True), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "missing_package_json"

    def test_resolves_file(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(CONFLICTED_PACKAGE)
        h = make_ctx(tmp_path)
        state = WorkflowState(conflict=True, scope="@lk", dependencies=[Dependency("core", "1.1.0-login.0")])
        assert merging.resolve_package_json_conflicts(state, h.ctx) == DONE

        resolved = (tmp_path / "package.json").read_text()
        assert "<<<<<<<" not in resolved
        assert '"@lk/core": "1.1.0-login.0",' in resolved
        assert '"@lk/ui": "2.0.0"' in resolved
        assert state.cr is not None
        assert state.cr.local_changes == {"core": "1.1.0-login.0", "ui": "2.1.0"}
        assert h.console.find("You had a local change of 2.1.0 for ui")
        assert h.console.find("resolved 1 conflict(s) in package.json")


class TestContinueRebase:
    """rebase_continue, conflict verification and staging."""

    def test_verify_and_stage(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        assert merging.verify_conflict_resolution(WorkflowState(), h.ctx) == DONE
        assert merging.stage_files(WorkflowState(), h.ctx) == DONE
        assert h.git.called("add_updated") == [("add_updated",)]

    def test_markers_left(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("check_conflict_markers", "package.json:4: leftover conflict marker")
        outcome = merging.verify_conflict_resolution(WorkflowState(), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "git_check_conflict_markers"

    def test_rebase_continue_finished(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(rebase_in_progress=True)
        assert merging.rebase_continue(state, h.ctx) == DONE
        assert state.rebase_in_progress is False

    def test_no_rebase_in_progress_is_done(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("rebase_continue", "fatal: No rebase in progress?")
        assert merging.rebase_continue(WorkflowState(), h.ctx) == DONE

    def test_rebase_continue_retries_after_user_fix(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, prompter=FakePrompter(answers={"resolved": True}))
        h.git.fail("rebase_continue", "CONFLICT (content): Merge conflict in src/a.js")
        result = StepEngine(h.ctx).run(Workflow("demo", (merging.rebase_continue,)), WorkflowState())
        assert isinstance(result, Ok)
        assert len(h.git.called("rebase_continue")) == 2
        assert h.console.find("retrying rebase_continue (1/10)")

    def test_rebase_continue_user_gives_up(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, prompter=FakePrompter(answers={"resolved": False}))
        h.git.fail("rebase_continue", "CONFLICT (content): Merge conflict in src/a.js")
        result = StepEngine(h.ctx).run(Workflow("demo", (merging.rebase_continue,)), WorkflowState())
        assert isinstance(result, Err)
        assert result.error.error.kind == "rebase_interrupted"

    def test_retry_budget_exhausted(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, config=Config(max_retries=2))
        h.git.fail("rebase_continue", "CONFLICT", times=5)
        result = StepEngine(h.ctx).run(Workflow("demo", (merging.rebase_continue,)), WorkflowState())
        assert isinstance(result, Err)
        assert result.error.error.kind == "retry_exhausted"
        assert len(h.git.called("rebase_continue")) == 3

    def test_finish_conflicted_rebase(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(conflict=True, rebase_in_progress=True)
        assert merging.finish_conflicted_rebase(state, h.ctx) == DONE
        assert state.conflict is False
        assert [c[0] for c in h.git.calls] == ["check_conflict_markers", "add_updated", "rebase_continue"]

    def test_finish_conflicted_rebase_stops_on_markers(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("check_conflict_markers", "leftover conflict marker")
        state = WorkflowState(conflict=True)
        assert isinstance(merging.finish_conflicted_rebase(state, h.ctx), Fatal)
        assert h.git.called("rebase_continue") == []
        assert state.conflict is True

    def test_finish_skipped_without_conflict(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        assert merging.finish_conflicted_rebase(WorkflowState(), h.ctx) == DONE
        assert h.git.calls == []


class TestPromotionRebase:
    """Rebase plan generation and pre-release commit removal."""

    def test_generate_plan(self, tmp_path: Path) -> None:
        oneline = "0987654 1.1.1-feature.1\net768df this is commit 2\n23fe4e3 1.1.1-feature.0\n0dda789 this is commit 1"
        h = make_ctx(tmp_path, git=FakeGit(oneline=oneline))
        assert merging.generate_rebase_plan(WorkflowState(), h.ctx) == DONE
        assert h.git.called("oneline_log") == [("oneline_log", "upstream/master")]
        plan = (tmp_path / REBASE_PLAN_FILE).read_text()
        assert plan == "pick 0dda789 this is commit 1\npick et768df this is commit 2\n"

    def test_empty_plan_advises(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, git=FakeGit(oneline="0987654 1.1.1-feature.1"))
        outcome = merging.generate_rebase_plan(WorkflowState(), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "git_log"
        assert not (tmp_path / REBASE_PLAN_FILE).exists()

    def test_remove_prerelease_commits(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        assert merging.remove_prerelease_commits(WorkflowState(), h.ctx) == DONE
        assert h.git.called("rebase_interactive") == [
            ("rebase_interactive", "upstream/master", tmp_path / REBASE_PLAN_FILE)
        ]

    def test_remove_prerelease_commits_resumes(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        merging.remove_prerelease_commits(WorkflowState(rebase_in_progress=True), h.ctx)
        assert h.git.called("rebase_interactive") == []
        assert h.git.called("rebase_continue") == [("rebase_continue",)]

    def test_remove_prerelease_commits_conflict(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        h.git.fail("rebase_interactive", "CONFLICT (content): Merge conflict in src/a.js")
        outcome = merging.remove_prerelease_commits(WorkflowState(), h.ctx)
        assert isinstance(outcome, Recoverable)
        assert outcome.error.kind == "rebase_interrupted"

    def test_remove_promotion_branches(self, tmp_path: Path) -> None:
        local = ("master", "promote-release-v1.1.1-feature.0", "promote-release-v1.1.1-feature.1", "feature")
        h = make_ctx(tmp_path, git=FakeGit(local=local))
        assert merging.remove_promotion_branches(WorkflowState(), h.ctx) == DONE
        assert h.git.called("delete_branch") == [
            ("delete_branch", "promote-release-v1.1.1-feature.0"),
            ("delete_branch", "promote-release-v1.1.1-feature.1"),
        ]
        assert h.git.local == ["master", "feature"]
