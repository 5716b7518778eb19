"""geeto init: interactive setup of providers and project config."""

from typing import Optional

import yaml

from geeto.clients.ai import DEFAULT_GEMINI_MODEL, DEFAULT_OPENROUTER_MODEL, CopilotClient
from geeto.clients.trello import fetch_lists
from geeto.config.credentials import (
    GEMINI_FILE,
    GITHUB_FILE,
    OPENROUTER_FILE,
    TRELLO_FILE,
    TrelloConfig,
    read_credentials,
    write_credentials,
)
from geeto.config.settings import PROJECT_CONFIG
from geeto.config.utils import GEETO_DIR, ensure_geeto_ignored, load_yaml
from geeto.models.core import AIProvider
from geeto.ui.output import GRAY, GREEN, NC, YELLOW, error, log, success, warn
from geeto.ui.prompts import Prompter


def _required(value: str) -> Optional[str]:
    return None if value.strip() else "Required"


def _setup_key_provider(prompter: Prompter, filename: str, label: str, default_model: str) -> bool:
    existing = read_credentials(filename)
    if existing.get("api_key") and not prompter.confirm(
        f"{label} key already stored in {GEETO_DIR / filename}. Replace it?", default=False
    ):
        return True
    api_key = prompter.ask(f"{label} API key", validate=_required)
    model = prompter.ask(f"{label} model", default=existing.get("model") or default_model)
    path = write_credentials(filename, {"api_key": api_key, "model": model})
    success(f"Wrote {path}")
    return True


def setup_ai_provider(prompter: Prompter) -> str:
    """Ask for the default provider and store its credentials. Returns the provider name."""
    provider = prompter.select(
        "Default AI provider for branch names and commit messages",
        [
            ("Gemini API (free tier, rate limited)", AIProvider.GEMINI),
            ("GitHub Copilot CLI (requires subscription)", AIProvider.COPILOT),
            ("OpenRouter (requires credits)", AIProvider.OPENROUTER),
            ("None, I write them myself", AIProvider.MANUAL),
        ],
    )
    if provider == AIProvider.GEMINI:
        _setup_key_provider(prompter, GEMINI_FILE, "Gemini", DEFAULT_GEMINI_MODEL)
    elif provider == AIProvider.OPENROUTER:
        _setup_key_provider(prompter, OPENROUTER_FILE, "OpenRouter", DEFAULT_OPENROUTER_MODEL)
    elif provider == AIProvider.COPILOT:
        if CopilotClient().is_available():
            success("Copilot CLI found")
        else:
            warn("Copilot CLI not found; install it and run `copilot` once to sign in")
    return provider.value


def setup_trello(prompter: Prompter) -> bool:
    if not prompter.confirm("Name branches after Trello cards?", default=False):
        return False
    print(f"  {GRAY}Get a key and token at https://trello.com/power-ups/admin{NC}")
    config = TrelloConfig(
        api_key=prompter.ask("Trello API key", validate=_required),
        token=prompter.ask("Trello token", validate=_required),
        board_id=prompter.ask("Board id (from the board URL)", validate=_required),
    )
    lists = fetch_lists(config)
    if lists:
        success(f"Connected to board with {len(lists)} lists")
    elif not prompter.confirm("Could not read the board. Save anyway?", default=False):
        return False
    path = write_credentials(
        TRELLO_FILE, {"api_key": config.api_key, "token": config.token, "board_id": config.board_id}
    )
    success(f"Wrote {path}")
    return True


def setup_github(prompter: Prompter) -> bool:
    if not prompter.confirm("Open pull requests and issues from geeto?", default=False):
        return False
    print(f"  {GRAY}A fine-grained token with pull request and issue write access is enough{NC}")
    token = prompter.ask("GitHub token", validate=_required)
    path = write_credentials(GITHUB_FILE, {"token": token})
    success(f"Wrote {path}")
    return True


def write_project_config(provider: str) -> None:
    config = load_yaml(PROJECT_CONFIG) or {}
    config.setdefault("ai", {})["provider"] = provider
    GEETO_DIR.mkdir(parents=True, exist_ok=True)
    with open(PROJECT_CONFIG, "w") as f:
        f.write("# geeto project configuration\n")
        f.write("# Override chain: bundled defaults < ~/.config/geeto/config.yaml < .geeto/config.yaml\n\n")
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    success(f"Wrote {PROJECT_CONFIG}")


def _print_howto() -> None:
    print(f"\n{GREEN}{'=' * 50}{NC}")
    print(f"{GREEN}geeto is ready!{NC}\n")
    print(f"  Config:  {GRAY}{PROJECT_CONFIG}{NC}")
    print(f"\n{YELLOW}Quick start:{NC}\n")
    print("  geeto                 stage, branch, commit, push, merge, clean up")
    print("  geeto --commit        jump straight to the commit step")
    print("  geeto --dry-run       show what would run without changing anything")
    print("  geeto undo            undo the last git action")
    print("  geeto status          show saved progress and upstream state")
    print()


def run_init(prompter: Optional[Prompter] = None) -> bool:
    """Interactive project setup. Returns False if the user backed out."""
    prompter = prompter or Prompter()
    print(f"\n{GREEN}geeto init{NC}: configure geeto for this repository\n")

    if PROJECT_CONFIG.exists() and not prompter.confirm(
        f"Found existing {PROJECT_CONFIG}. Update it?", default=False
    ):
        log("Aborted.")
        return False

    try:
        provider = setup_ai_provider(prompter)
        setup_trello(prompter)
        setup_github(prompter)
        write_project_config(provider)
    except OSError as e:
        error(f"Failed to write configuration: {e}")
        return False

    if ensure_geeto_ignored():
        log("Added .geeto to .gitignore")
    _print_howto()
    return True
