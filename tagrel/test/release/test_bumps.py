from __future__ import annotations

import pytest

from tagrel.release.bumps import (
    BumpMessage,
    RepoCoordinates,
    clean_identifier,
    format_bump_message,
    identifier_from_reason,
    identifier_from_versions,
    normalize_scope,
    parse_bump_message,
    parse_github_remote,
    promoted_tag,
    promotion_branch,
)


class TestBumpMessage:
    """Tests for bump commit messages."""

    def test_format(self) -> None:
        message = format_bump_message([("core", "1.2.0-login.0"), ("ui", "3.0.1")], "Add login")
        assert message == "Bumped core to 1.2.0-login.0, ui to 3.0.1: Add login"

    def test_parse(self) -> None:
        parsed = parse_bump_message("Bumped core to 1.2.0-login.0, ui to 3.0.1: Add login")
        assert parsed == BumpMessage(packages=(("core", "1.2.0-login.0"), ("ui", "3.0.1")), reason="Add login")
        assert parsed is not None
        assert parsed.names == ["core", "ui"]

    def test_parse_rejects_other_messages(self) -> None:
        assert parse_bump_message("Fix typo in README") is None


def test_clean_identifier() -> None:
    assert clean_identifier("feature-login") == "login"
    assert clean_identifier("defect-crash") == "crash"
    assert clean_identifier(" login ") == "login"
    assert clean_identifier("featureless") == "featureless"


def test_identifier_from_versions() -> None:
    assert identifier_from_versions(["3.0.1", "1.2.0-login.0"]) == "login"
    assert identifier_from_versions(["3.0.1"]) == ""


def test_identifier_from_reason() -> None:
    assert identifier_from_reason("Fix the login page") == "fix-login-page"
    assert identifier_from_reason("Login: login again!") == "login-again"
    assert identifier_from_reason("") == ""


@pytest.mark.parametrize(
    "url",
    [
        "git@github.com:leankit/core.git",
        "https://github.com/leankit/core.git",
        "https://github.com/leankit/core",
        "https://github.com/leankit/core/\n",
    ],
)
def test_parse_github_remote(url: str) -> None:
    assert parse_github_remote(url) == RepoCoordinates(owner="leankit", name="core")


def test_parse_github_remote_rejects_other_hosts() -> None:
    assert parse_github_remote("https://gitlab.com/leankit/core.git") is None


def test_repo_coordinates_slug() -> None:
    assert RepoCoordinates("leankit", "core").slug == "leankit/core"


def test_promotion_branch_roundtrip() -> None:
    branch = promotion_branch("v1.1.1-feature.0")
    assert branch == "promote-release-v1.1.1-feature.0"
    assert promoted_tag(branch) == "v1.1.1-feature.0"
    assert promoted_tag("feature-v2.0.0-x.1") == "v2.0.0-x.1"


def test_normalize_scope() -> None:
    assert normalize_scope("lk") == "@lk"
    assert normalize_scope("@lk") == "@lk"
