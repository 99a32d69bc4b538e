"""Step functions.

Every step has the signature ``(state, ctx) -> Outcome`` and is grouped by
concern; ``tagrel.workflow.workflows`` composes them into named workflows.
"""

from . import branches, commits, dependencies, github, merging, notes, publishing, versioning

__all__ = [
    "branches",
    "commits",
    "dependencies",
    "github",
    "merging",
    "notes",
    "publishing",
    "versioning",
]
