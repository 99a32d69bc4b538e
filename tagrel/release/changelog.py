"""CHANGELOG.md editing.

Layout::

    ## 2.x

    ### 2.1.0

    * newest change
    * older change

    ### 2.0.0
    ...

A major release opens a new ``## N.x`` section; other releases go under the
first ``##`` heading. A ``### Next`` section, when present, holds hand-written
notes for the upcoming release.
"""

from __future__ import annotations

import re

_NEXT_SECTION_RE = re.compile(r"### Next([^#]+)")
_SECTION_RE = re.compile(r"^(## .*\n)", re.MULTILINE)


def wildcard_header(version: str) -> str:
    """``2.1.0`` -> ``2.x``."""
    return re.sub(r"\.\d+\.\d+", ".x", version, count=1)


def extract_next_section(contents: str) -> tuple[str | None, str]:
    """Pull the ``### Next`` notes out of ``contents``.

    Returns ``(notes, remaining)``; ``notes`` is None when there is no such
    section, in which case ``remaining`` is ``contents`` unchanged.
    """
    m = _NEXT_SECTION_RE.search(contents)
    if m is None:
        return None, contents
    return m.group(1).strip(), contents[: m.start()] + contents[m.end() :]


def update_changelog(contents: str, *, new_version: str, log: str, is_major: bool) -> str:
    update = f"### {new_version}\n\n{log}"
    header = f"## {wildcard_header(new_version)}"

    if is_major:
        return f"{header}\n\n{update}\n\n{contents}"
    if not contents:
        return f"{header}\n\n{update}\n"

    updated, count = _SECTION_RE.subn(lambda m: f"{m.group(1)}\n{update}\n", contents, count=1)
    if count == 0:
        return f"{header}\n\n{update}\n\n{contents}"
    return updated
