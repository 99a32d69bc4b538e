"""GitHub remotes, releases and pull requests."""

from __future__ import annotations

from tagrel.core.result import Err, Ok
from tagrel.output.console import Style
from tagrel.release.bumps import parse_bump_message, parse_github_remote
from tagrel.services.github import HostError

from ..context import StepContext
from ..outcome import DONE, Decision, Outcome, Recoverable, StepError
from ..ports import Question
from ..state import RemoteInfo, WorkflowState
from ._common import advise, ask_text, confirm, git_failed


def _report(ctx: StepContext, error: HostError | StepError | str) -> Recoverable:
    """A GitHub failure that is printed; the run goes on."""
    message = error if isinstance(error, str) else error.message
    hint = None if isinstance(error, str) else error.hint

    def recover(_: WorkflowState) -> Decision:
        ctx.console.error(message)
        return Decision.CONTINUE

    return Recoverable(StepError(kind="host", message=message, hint=hint), recover)


def _remote(state: WorkflowState, ctx: StepContext, remote: str, role: str) -> Outcome:
    result = ctx.git.remote_url(remote)
    if isinstance(result, Err):
        return _report(ctx, result.error.message)

    url = result.value.strip()
    state.remotes[remote] = RemoteInfo(exists=True, url=url)
    coords = parse_github_remote(url)
    if role == "upstream":
        state.github.upstream = coords
    else:
        state.github.origin = coords
    return DONE


def github_upstream(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _remote(state, ctx, ctx.upstream, "upstream")


def github_origin(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _remote(state, ctx, ctx.origin, "origin")


def _show_url(ctx: StepContext, url: str) -> None:
    ctx.console.print(url, Style.WARNING)


def github_release(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Publish a GitHub release for the tag, named after the oldest log entry."""
    upstream = state.github.upstream
    if upstream is None:
        return _report(ctx, f"no GitHub coordinates for remote '{ctx.upstream}'")
    if state.versions is None:
        return _report(ctx, "version was not updated")

    default_name = state.log.split("\n")[-1].replace("* ", "", 1)
    if state.release_name or ctx.config.no_output:
        name = state.release_name or default_name
    else:
        name = ask_text(
            ctx,
            Question(
                kind="input",
                name="name",
                message="What do you want to name the release?",
                default=default_name,
            ),
        )

    ctx.console.begin("release to github")
    result = ctx.host.create_release(
        upstream.owner,
        upstream.name,
        tag=f"v{state.versions.new}",
        title=name,
        body=state.log,
        prerelease=bool(state.prerelease),
    )
    ctx.console.end()
    match result:
        case Ok(url):
            _show_url(ctx, url)
            return DONE
        case Err(e):
            return _report(ctx, e)


def _open_pull_request(
    state: WorkflowState,
    ctx: StepContext,
    *,
    head: str,
    base: str,
    label: str,
) -> Outcome:
    upstream = state.github.upstream
    if upstream is None:
        return _report(ctx, f"no GitHub coordinates for remote '{ctx.upstream}'")

    ctx.console.begin("creating pull request to github")
    created = ctx.host.create_pull_request(
        upstream.owner,
        upstream.name,
        title=state.pull_request.title,
        head=head,
        base=base,
        body=state.pull_request.body,
    )
    ctx.console.end()
    if isinstance(created, Err):
        return _report(ctx, created.error)

    pr = created.value
    state.pull_request.number = pr.number
    state.pull_request.url = pr.url
    labelled = ctx.host.add_labels(upstream.owner, upstream.name, pr.number, [label])
    _show_url(ctx, pr.url)
    if isinstance(labelled, Err):
        return _report(ctx, labelled.error)
    return DONE


def create_pull_request_against_base(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Open a pull request of the bump branch into develop (or master)."""
    upstream = state.github.upstream
    if upstream is None:
        return _report(ctx, f"no GitHub coordinates for remote '{ctx.upstream}'")

    bump = parse_bump_message(state.bump_comment)
    state.pull_request.title = bump.reason if bump else ""
    return _open_pull_request(
        state,
        ctx,
        head=f"{upstream.owner}:{state.branch}",
        base=ctx.develop if state.has_develop_branch else ctx.master,
        label=ctx.config.labels.base,
    )


def create_pull_request_against_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Open a pull request from the fork's branch into the upstream branch."""
    origin = state.github.origin
    if origin is None:
        return _report(ctx, f"no GitHub coordinates for remote '{ctx.origin}'")

    return _open_pull_request(
        state,
        ctx,
        head=f"{origin.owner}:{state.branch}",
        base=state.dev_branch or state.branch,
        label=ctx.config.labels.branch,
    )


def verify_remotes(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.remotes()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)

    names = result.value
    for remote in (ctx.origin, ctx.upstream):
        known = state.remotes.get(remote)
        state.remotes[remote] = RemoteInfo(exists=remote in names, url=known.url if known else None)
    return DONE


def verify_origin(state: WorkflowState, ctx: StepContext) -> Outcome:
    ctx.console.begin("Verifying origin remote")
    origin = state.remotes.get(ctx.origin)
    ctx.console.end()
    if origin is None or not origin.exists:
        return advise(ctx, "git_origin")
    return DONE


def verify_upstream(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Add the upstream remote pointing at the repository origin was forked from."""
    upstream = state.remotes.get(ctx.upstream)
    if upstream is not None and upstream.exists:
        return DONE

    origin = state.github.origin
    if origin is None:
        return _report(ctx, f"no GitHub coordinates for remote '{ctx.origin}'")

    ctx.console.begin("Creating upstream remote")
    details = ctx.host.repo_details(origin.owner, origin.name)
    if isinstance(details, Err):
        ctx.console.end()
        return _report(ctx, details.error)

    source = details.value.source()
    known = state.remotes.get(ctx.origin)
    origin_url = known.url if known is not None else None
    url = source.https_url if origin_url and "https" in origin_url else source.ssh_url
    added = ctx.git.add_remote(ctx.upstream, url)
    ctx.console.end()
    if isinstance(added, Err):
        return _report(ctx, added.error.message)
    state.remotes[ctx.upstream] = RemoteInfo(exists=True, url=url)
    return DONE


def update_pull_request_title(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.last_commit_message()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)

    state.pull_request.title = ask_text(
        ctx,
        Question(
            kind="input",
            name="title",
            message="What is the title of your pull request?",
            default=result.value.strip(),
        ),
    ).strip()
    return DONE


def update_pull_request_body(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Start the body from the repository's pull request template."""
    edit = confirm(ctx, "body", "Would you like to edit the body of your pull request?")
    contents = ctx.files.read_text(ctx.config.pull_request_template_path) or ""
    if edit:
        ctx.console.begin("pull request body preview")
        state.pull_request.body = ctx.prompter.edit(contents).strip()
        ctx.console.end()
    else:
        state.pull_request.body = contents.strip()
    return DONE
