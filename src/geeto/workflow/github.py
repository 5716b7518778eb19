"""`geeto pr` and `geeto issue`: open pull requests and issues on the origin repository."""

from typing import Optional

from geeto.clients.github import (
    create_issue,
    create_pull_request,
    get_default_branch,
    list_labels,
    list_pull_requests,
    parse_repo_from_url,
)
from geeto.models.state import WorkflowContext
from geeto.ui.output import GRAY, NC, error, hyperlink, log, success, warn


def resolve_repo(ctx: WorkflowContext) -> Optional[tuple[str, str]]:
    url = ctx.facts.remote_url()
    if not url:
        error("No 'origin' remote configured")
        return None
    repo = parse_repo_from_url(url)
    if not repo:
        error(f"origin is not a GitHub repository: {url}")
    return repo


def _non_empty(value: str) -> Optional[str]:
    return None if value.strip() else "Cannot be empty"


def handle_pull_request(ctx: WorkflowContext) -> bool:
    repo = resolve_repo(ctx)
    if not repo:
        return False
    owner, name = repo
    head = ctx.facts.current_branch()
    if not head:
        error("Not on a branch (detached HEAD)")
        return False

    existing = list_pull_requests(owner, name, head=head)
    if existing:
        pr = existing[0]
        warn(f"Pull request #{pr.number} already open for {head}: {hyperlink(pr.url, pr.url)}")
        return False

    saved = ctx.store.load()
    default_base = (saved.target_branch if saved else None) or get_default_branch(owner, name) or "main"
    if default_base == head:
        default_base = get_default_branch(owner, name) or "main"
    title = ctx.prompter.ask("Title", default=ctx.facts.last_commit_subject(), validate=_non_empty)
    body = ctx.prompter.ask("Description (optional)")
    base = ctx.prompter.ask("Base branch", default=default_base, validate=_non_empty)
    draft = ctx.prompter.confirm("Open as draft?", default=False)

    if ctx.runner.dry_run:
        log(f"[dry-run] Would open PR {head} -> {base}: {title}")
        return True
    pr = create_pull_request(owner, name, title=title, head=head, base=base, body=body, draft=draft)
    if not pr:
        return False
    success(f"Opened pull request #{pr.number}: {hyperlink(pr.url, pr.url)}")
    return True


def handle_issue(ctx: WorkflowContext) -> bool:
    repo = resolve_repo(ctx)
    if not repo:
        return False
    owner, name = repo

    title = ctx.prompter.ask("Issue title", validate=_non_empty)
    body = ctx.prompter.ask("Description (optional)")

    labels: list[str] = []
    available = list_labels(owner, name)
    if available:
        print(f"  {GRAY}Labels: {', '.join(available)}{NC}")
        wanted = ctx.prompter.ask("Labels (comma separated, optional)")
        for label in (part.strip() for part in wanted.split(",")):
            if not label:
                continue
            if label in available:
                labels.append(label)
            else:
                warn(f"Unknown label '{label}', skipping")

    if ctx.runner.dry_run:
        log(f"[dry-run] Would open issue: {title}")
        return True
    issue = create_issue(owner, name, title=title, body=body, labels=labels)
    if not issue:
        return False
    success(f"Opened issue #{issue.number}: {hyperlink(issue.url, issue.url)}")
    return True
