"""GitHub REST API client."""

import json
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional, Union

from geeto.config.credentials import GithubConfig
from geeto.models.core import Issue, PullRequest
from geeto.ui.output import error

GITHUB_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"

_SSH_RE = re.compile(r"git@github\.com:([^/]+)/([^/]+?)(?:\.git)?/?$")
_HTTPS_RE = re.compile(r"github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$")


def parse_repo_from_url(remote_url: str) -> Optional[tuple[str, str]]:
    """(owner, repo) from an SSH or HTTPS GitHub remote URL."""
    url = remote_url.strip()
    match = _SSH_RE.search(url) or _HTTPS_RE.search(url)
    if not match:
        return None
    return match.group(1), match.group(2)


def _get_token() -> Optional[str]:
    config = GithubConfig.load()
    return config.token if config else None


def github_api(
    method: str,
    endpoint: str,
    payload: Optional[dict] = None,
    params: Optional[dict] = None,
) -> Optional[Union[dict, list]]:
    """Call the GitHub REST API. Returns None on error."""
    token = _get_token()
    if not token:
        error("GitHub token not configured. Run `geeto init` or set GITHUB_TOKEN.")
        return None

    url = f"{GITHUB_API_URL}{endpoint}"
    if params:
        url += "?" + urllib.parse.urlencode(params)
    req = urllib.request.Request(
        url,
        data=json.dumps(payload).encode() if payload is not None else None,
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "Content-Type": "application/json",
        },
        method=method,
    )
    try:
        with urllib.request.urlopen(req, timeout=30) as resp:  # nosemgrep: dynamic-urllib-use-detected
            body = resp.read()
            return json.loads(body) if body else {}
    except urllib.error.HTTPError as e:
        detail = ""
        try:
            detail = json.loads(e.read()).get("message", "")
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
            pass
        error(f"GitHub API HTTP {e.code}: {detail or e.reason}")
        return None
    except urllib.error.URLError as e:
        error(f"GitHub API connection error: {e.reason}")
        return None
    except (json.JSONDecodeError, TimeoutError) as e:
        error(f"GitHub API error: {e}")
        return None


def create_pull_request(
    owner: str, repo: str, title: str, head: str, base: str, body: str = "", draft: bool = False
) -> Optional[PullRequest]:
    data = github_api(
        "POST",
        f"/repos/{owner}/{repo}/pulls",
        {"title": title, "body": body, "head": head, "base": base, "draft": draft},
    )
    if not isinstance(data, dict) or "number" not in data:
        return None
    return PullRequest.from_dict(data)


def list_pull_requests(owner: str, repo: str, head: Optional[str] = None) -> list[PullRequest]:
    """Open pull requests, optionally only those from `head` (a branch of `owner`)."""
    params = {"state": "open", "per_page": "30"}
    if head:
        params["head"] = f"{owner}:{head}"
    data = github_api("GET", f"/repos/{owner}/{repo}/pulls", params=params)
    if not isinstance(data, list):
        return []
    return [PullRequest.from_dict(pr) for pr in data]


def get_default_branch(owner: str, repo: str) -> Optional[str]:
    data = github_api("GET", f"/repos/{owner}/{repo}")
    if not isinstance(data, dict):
        return None
    return data.get("default_branch")


def create_issue(
    owner: str,
    repo: str,
    title: str,
    body: str = "",
    labels: Optional[list[str]] = None,
    assignees: Optional[list[str]] = None,
) -> Optional[Issue]:
    payload: dict = {"title": title, "body": body}
    if labels:
        payload["labels"] = labels
    if assignees:
        payload["assignees"] = assignees
    data = github_api("POST", f"/repos/{owner}/{repo}/issues", payload)
    if not isinstance(data, dict) or "number" not in data:
        return None
    return Issue.from_dict(data)


def list_labels(owner: str, repo: str) -> list[str]:
    data = github_api("GET", f"/repos/{owner}/{repo}/labels", params={"per_page": "100"})
    if not isinstance(data, list):
        return []
    return [label["name"] for label in data if isinstance(label, dict) and "name" in label]
