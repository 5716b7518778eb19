"""Per-provider credential files under .geeto/ (flat `key = "value"` TOML)."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from geeto.config.utils import GEETO_DIR, ensure_geeto_ignored
from geeto.ui.output import warn

GEMINI_FILE = "gemini.toml"
OPENROUTER_FILE = "openrouter.toml"
TRELLO_FILE = "trello.toml"
GITHUB_FILE = "github.toml"


def read_credentials(name: str, base: Path = GEETO_DIR) -> dict:
    """Read .geeto/<name>. Missing file gives {}; a malformed one is reported and ignored."""
    path = base / name
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        warn(f"Ignoring malformed {path}: {e}")
        return {}
    return {k: str(v) for k, v in data.items() if not isinstance(v, dict)}


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_credentials(name: str, values: dict, base: Path = GEETO_DIR) -> Path:
    """Write .geeto/<name> and make sure .geeto stays out of git."""
    base.mkdir(parents=True, exist_ok=True)
    path = base / name
    lines = [f"{key} = {_quote(str(val))}" for key, val in values.items() if val is not None]
    path.write_text("\n".join(lines) + "\n")
    os.chmod(path, 0o600)
    ensure_geeto_ignored()
    return path


@dataclass
class GeminiConfig:
    api_key: str
    model: Optional[str] = None

    @classmethod
    def load(cls, base: Path = GEETO_DIR) -> Optional["GeminiConfig"]:
        data = read_credentials(GEMINI_FILE, base)
        key = os.environ.get("GEMINI_API_KEY") or data.get("api_key")
        return cls(api_key=key, model=data.get("model")) if key else None


@dataclass
class OpenRouterConfig:
    api_key: str
    model: Optional[str] = None

    @classmethod
    def load(cls, base: Path = GEETO_DIR) -> Optional["OpenRouterConfig"]:
        data = read_credentials(OPENROUTER_FILE, base)
        key = os.environ.get("OPENROUTER_API_KEY") or data.get("api_key")
        return cls(api_key=key, model=data.get("model")) if key else None


@dataclass
class TrelloConfig:
    api_key: str
    token: str
    board_id: str

    @classmethod
    def load(cls, base: Path = GEETO_DIR) -> Optional["TrelloConfig"]:
        data = read_credentials(TRELLO_FILE, base)
        if not all(data.get(k) for k in ("api_key", "token", "board_id")):
            return None
        return cls(api_key=data["api_key"], token=data["token"], board_id=data["board_id"])


@dataclass
class GithubConfig:
    token: str

    @classmethod
    def load(cls, base: Path = GEETO_DIR) -> Optional["GithubConfig"]:
        token = os.environ.get("GITHUB_TOKEN") or read_credentials(GITHUB_FILE, base).get("token")
        return cls(token=token) if token else None
