"""Tests for tagrel.workflow.steps.github."""

from __future__ import annotations

from pathlib import Path

from tagrel.core.config import Config
from tagrel.release.bumps import RepoCoordinates
from tagrel.services.github import RepoDetails
from tagrel.test.fakes import FakeGit, FakeHost, FakePrompter, make_ctx
from tagrel.workflow.outcome import DONE, Decision, Fatal, Recoverable
from tagrel.workflow.state import RemoteInfo, VersionChange, WorkflowState
from tagrel.workflow.steps import github

UPSTREAM = RepoCoordinates("lk", "web")
FORK = RepoCoordinates("dev", "web")


def _released_state(**kwargs: object) -> WorkflowState:
    state = WorkflowState(versions=VersionChange("1.2.3", "1.3.0"), log="* Add login\n* Fix typo", **kwargs)  # type: ignore[arg-type]
    state.github.upstream = UPSTREAM
    return state


class TestRemotes:
    """github_upstream and github_origin."""

    def test_reads_coordinates(self, tmp_path: Path) -> None:
        git = FakeGit(urls={"upstream": "git@github.com:lk/web.git", "origin": "https://github.com/dev/web"})
        h = make_ctx(tmp_path, git=git)
        state = WorkflowState()
        assert github.github_upstream(state, h.ctx) == DONE
        assert github.github_origin(state, h.ctx) == DONE
        assert state.github.upstream == UPSTREAM
        assert state.github.origin == FORK
        assert state.remotes["upstream"] == RemoteInfo(exists=True, url="git@github.com:lk/web.git")

    def test_missing_remote_is_reported(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState()
        outcome = github.github_upstream(state, h.ctx)
        assert isinstance(outcome, Recoverable)
        assert outcome.error.kind == "host"
        assert outcome.recover is not None
        assert outcome.recover(state) is Decision.CONTINUE
        assert h.console.has_error()


class TestRelease:
    """github_release."""

    def test_release_named_after_oldest_entry(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        assert github.github_release(_released_state(), h.ctx) == DONE
        [release] = h.host.releases
        assert (release.owner, release.repo, release.tag) == ("lk", "web", "v1.3.0")
        assert release.title == "Fix typo"
        assert release.body == "* Add login\n* Fix typo"
        assert release.prerelease is False
        assert h.console.find("https://github.com/lk/web/releases/tag/v1.3.0")

    def test_release_name_from_option(self, tmp_path: Path) -> None:
        prompter = FakePrompter()
        h = make_ctx(tmp_path, prompter=prompter)
        github.github_release(_released_state(release_name="Login", prerelease="login"), h.ctx)
        assert h.host.releases[0].title == "Login"
        assert h.host.releases[0].prerelease is True
        assert prompter.asked == []

    def test_release_name_asked(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, prompter=FakePrompter(answers={"name": "Spring release"}))
        github.github_release(_released_state(), h.ctx)
        assert h.host.releases[0].title == "Spring release"

    def test_no_output_skips_question(self, tmp_path: Path) -> None:
        prompter = FakePrompter()
        h = make_ctx(tmp_path, prompter=prompter, config=Config(no_output=True))
        github.github_release(_released_state(), h.ctx)
        assert prompter.asked == []

    def test_failure_does_not_stop_the_run(self, tmp_path: Path) -> None:
        host = FakeHost()
        host.fail("create_release", "HTTP 422: Validation Failed")
        h = make_ctx(tmp_path, host=host)
        outcome = github.github_release(_released_state(), h.ctx)
        assert isinstance(outcome, Recoverable)
        assert outcome.error.message == "HTTP 422: Validation Failed"

    def test_unknown_upstream(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        outcome = github.github_release(WorkflowState(versions=VersionChange("1.0.0", "1.0.1")), h.ctx)
        assert isinstance(outcome, Recoverable)
        assert h.host.releases == []


class TestPullRequests:
    """Pull request creation."""

    def test_against_develop(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(
            branch="feature-bump",
            has_develop_branch=True,
            bump_comment="Bumped core to 1.2.0: Add login",
        )
        state.github.upstream = UPSTREAM
        state.pull_request.body = "body"
        assert github.create_pull_request_against_base(state, h.ctx) == DONE
        [pr] = h.host.pull_requests
        assert (pr.title, pr.head, pr.base, pr.body) == ("Add login", "lk:feature-bump", "develop", "body")
        assert h.host.labels == [(1, ("Ready to Merge Into Develop",))]
        assert state.pull_request.number == 1
        assert state.pull_request.url == "https://github.com/lk/web/pull/1"

    def test_against_master(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(branch="feature-bump")
        state.github.upstream = UPSTREAM
        github.create_pull_request_against_base(state, h.ctx)
        assert h.host.pull_requests[0].base == "master"

    def test_against_branch(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(branch="feature-login", dev_branch="feature-auth")
        state.github.upstream = UPSTREAM
        state.github.origin = FORK
        state.pull_request.title = "Add login"
        github.create_pull_request_against_branch(state, h.ctx)
        [pr] = h.host.pull_requests
        assert (pr.head, pr.base) == ("dev:feature-login", "feature-auth")
        assert h.host.labels == [(1, ("Needs Developer Review",))]

    def test_same_branch_name_by_default(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(branch="feature-login")
        state.github.upstream = UPSTREAM
        state.github.origin = FORK
        github.create_pull_request_against_branch(state, h.ctx)
        assert h.host.pull_requests[0].base == "feature-login"

    def test_label_failure_keeps_pull_request(self, tmp_path: Path) -> None:
        host = FakeHost()
        host.fail("add_labels", "HTTP 404")
        h = make_ctx(tmp_path, host=host)
        state = WorkflowState(branch="feature-bump")
        state.github.upstream = UPSTREAM
        outcome = github.create_pull_request_against_base(state, h.ctx)
        assert isinstance(outcome, Recoverable)
        assert state.pull_request.number == 1
        assert h.console.find("https://github.com/lk/web/pull/1")


class TestVerifyRemotes:
    """verify_remotes, verify_origin and verify_upstream."""

    def test_verify_remotes(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path, git=FakeGit(remotes=("origin",)))
        state = WorkflowState()
        github.verify_remotes(state, h.ctx)
        assert state.remotes["origin"].exists
        assert not state.remotes["upstream"].exists

    def test_missing_origin(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        outcome = github.verify_origin(WorkflowState(), h.ctx)
        assert isinstance(outcome, Fatal)
        assert outcome.error.advice == "git_origin"

    def test_upstream_already_present(self, tmp_path: Path) -> None:
        h = make_ctx(tmp_path)
        state = WorkflowState(remotes={"upstream": RemoteInfo(exists=True)})
        assert github.verify_upstream(state, h.ctx) == DONE
        assert h.git.called("add_remote") == []

    def test_adds_upstream_from_fork_parent(self, tmp_path: Path) -> None:
        parent = RepoDetails(ssh_url="git@github.com:lk/web.git", https_url="https://github.com/lk/web.git")
        details = RepoDetails(ssh_url="git@github.com:dev/web.git", https_url="https://github.com/dev/web.git", parent=parent)
        h = make_ctx(tmp_path, host=FakeHost(details=details))
        state = WorkflowState(remotes={"origin": RemoteInfo(exists=True, url="git@github.com:dev/web.git")})
        state.github.origin = FORK
        assert github.verify_upstream(state, h.ctx) == DONE
        assert h.git.called("add_remote") == [("add_remote", "upstream", "git@github.com:lk/web.git")]
        assert state.remotes["upstream"].exists

    def test_https_origin_gets_https_upstream(self, tmp_path: Path) -> None:
        parent = RepoDetails(ssh_url="git@github.com:lk/web.git", https_url="https://github.com/lk/web.git")
        details = RepoDetails(ssh_url="", https_url="", parent=parent)
        h = make_ctx(tmp_path, host=FakeHost(details=details))
        state = WorkflowState(remotes={"origin": RemoteInfo(exists=True, url="https://github.com/dev/web.git")})
        state.github.origin = FORK
        github.verify_upstream(state, h.ctx)
        assert h.git.called("add_remote") == [("add_remote", "upstream", "https://github.com/lk/web.git")]


class TestPullRequestText:
    """update_pull_request_title and update_pull_request_body."""

    def test_title_defaults_to_last_commit(self, tmp_path: Path) -> None:
        prompter = FakePrompter()
        h = make_ctx(tmp_path, git=FakeGit(last_message="Add login\n"), prompter=prompter)
        state = WorkflowState()
        github.update_pull_request_title(state, h.ctx)
        assert state.pull_request.title == "Add login"
        assert prompter.questions("title")[0].default == "Add login"

    def test_body_from_template(self, tmp_path: Path) -> None:
        (tmp_path / ".github").mkdir()
        (tmp_path / ".github" / "PULL_REQUEST_TEMPLATE.md").write_text("## Changes\n\n")
        h = make_ctx(tmp_path, prompter=FakePrompter(answers={"body": False}))
        state = WorkflowState()
        github.update_pull_request_body(state, h.ctx)
        assert state.pull_request.body == "## Changes"

    def test_body_edited(self, tmp_path: Path) -> None:
        prompter = FakePrompter(edit_with=lambda text: text + "Adds login.\n")
        h = make_ctx(tmp_path, prompter=prompter)
        state = WorkflowState()
        github.update_pull_request_body(state, h.ctx)
        assert state.pull_request.body == "Adds login."
        assert prompter.edited == [""]
