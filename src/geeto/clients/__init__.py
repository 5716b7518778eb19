"""External service clients: AI providers, GitHub and Trello."""

from geeto.clients.ai import (
    AIClient,
    CopilotClient,
    GeminiClient,
    OpenRouterClient,
    UnavailableClient,
    build_ai_client,
)
from geeto.clients.github import (
    create_issue,
    create_pull_request,
    get_default_branch,
    list_labels,
    list_pull_requests,
    parse_repo_from_url,
)
from geeto.clients.trello import fetch_cards, fetch_lists

__all__ = [
    # AI
    "AIClient",
    "GeminiClient",
    "OpenRouterClient",
    "CopilotClient",
    "UnavailableClient",
    "build_ai_client",
    # GitHub
    "parse_repo_from_url",
    "create_pull_request",
    "list_pull_requests",
    "get_default_branch",
    "create_issue",
    "list_labels",
    # Trello
    "fetch_lists",
    "fetch_cards",
]
