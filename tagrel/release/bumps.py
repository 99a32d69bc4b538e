"""Dependency bump messages, pre-release identifiers and remote naming."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

CHANGE_TYPES = ("feature", "defect", "rework")
PROMOTION_BRANCH_PREFIX = "promote-release-"

_BUMP_RE = re.compile(r"Bumped (.*): (.*)")
_BUMP_ITEM_RE = re.compile(r"([\w-]+) to ([\w.-]+)")
_CHANGE_TYPE_PREFIX_RE = re.compile(r"^(defect|feature|rework)-")
_TAG_IDENTIFIER_RE = re.compile(r"^\d+\.\d+\.\d+-(.+)\.\d+$")
_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/(.+?)(?:\.git)?/?$")
_WORD_RE = re.compile(r"[a-z0-9]+")

# Common English words left out of identifiers derived from a change reason.
STOP_WORDS = frozenset(
    """
    a about above after again all also am an and any are as at be because been
    before being below between both but by can could did do does doing down
    during each few for from further had has have having he her here hers him
    his how i if in into is it its just me more most my no nor not now of off
    on once only or other our ours out over own same she should so some such
    than that the their theirs them then there these they this those through
    to too under until up very was we were what when where which while who
    whom why will with would you your yours
    """.split()
)


@dataclass(frozen=True, slots=True)
class RepoCoordinates:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class BumpMessage:
    packages: tuple[tuple[str, str], ...]
    reason: str

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.packages]


def format_bump_message(dependencies: Iterable[tuple[str, str]], reason: str) -> str:
    """``Bumped core to 1.2.0-login.0, ui to 3.0.1: Add login``."""
    items = ", ".join(f"{name} to {version}" for name, version in dependencies)
    return f"Bumped {items}: {reason}"


def parse_bump_message(message: str) -> BumpMessage | None:
    m = _BUMP_RE.search(message)
    if m is None:
        return None

    packages: list[tuple[str, str]] = []
    for item in m.group(1).split(","):
        im = _BUMP_ITEM_RE.search(item)
        if im:
            packages.append((im.group(1), im.group(2)))
    return BumpMessage(packages=tuple(packages), reason=m.group(2).strip())


def clean_identifier(identifier: str) -> str:
    """Strip a change-type prefix: ``feature-login`` -> ``login``."""
    return _CHANGE_TYPE_PREFIX_RE.sub("", identifier.strip())


def identifier_from_versions(versions: Sequence[str]) -> str:
    """First pre-release identifier among ``versions`` (``""`` if none)."""
    for version in versions:
        m = _TAG_IDENTIFIER_RE.match(version)
        if m:
            return m.group(1)
    return ""


def identifier_from_reason(reason: str) -> str:
    """Derive an identifier from free text: ``Fix the login page`` -> ``fix-login-page``."""
    words: list[str] = []
    for word in _WORD_RE.findall(reason.lower()):
        if word not in STOP_WORDS and word not in words:
            words.append(word)
    return "-".join(words)


def parse_github_remote(url: str) -> RepoCoordinates | None:
    """Owner and name from an ssh or https GitHub remote URL."""
    m = _GITHUB_REMOTE_RE.search(url.strip())
    if m is None:
        return None
    return RepoCoordinates(owner=m.group(1), name=m.group(2))


def promotion_branch(tag: str) -> str:
    return f"{PROMOTION_BRANCH_PREFIX}{tag}"


def promoted_tag(branch: str) -> str:
    """Tag encoded in a promotion branch (``promote-release-v1.1.1-feature.0``)."""
    if branch.startswith(PROMOTION_BRANCH_PREFIX):
        return branch.removeprefix(PROMOTION_BRANCH_PREFIX)
    i = branch.find("v")
    return branch[i:] if i >= 0 else branch


def normalize_scope(scope: str) -> str:
    return scope if scope.startswith("@") else f"@{scope}"
