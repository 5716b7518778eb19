"""AI prompt templates with layered config overrides.

Priority chain: bundled defaults < ~/.config/geeto/prompts.yaml < .geeto/prompts.yaml
"""

from pathlib import Path
from typing import Optional

from geeto.config.settings import load_bundled
from geeto.config.utils import GEETO_DIR, deep_merge, load_yaml

_prompts: Optional[dict] = None
_loaded_sources: list[str] = []

GLOBAL_PROMPTS = Path.home() / ".config" / "geeto" / "prompts.yaml"
PROJECT_PROMPTS = GEETO_DIR / "prompts.yaml"


def load_prompts() -> dict:
    """Load prompts with layered overrides: defaults < global < project."""
    global _loaded_sources
    _loaded_sources = []

    result = load_bundled("prompts.yaml")
    _loaded_sources.append("defaults")

    for path in (GLOBAL_PROMPTS, PROJECT_PROMPTS):
        overrides = load_yaml(path)
        if overrides:
            result = deep_merge(result, overrides)
            _loaded_sources.append(str(path))

    return result


def get_prompts() -> dict:
    """Get cached prompts (loads on first access)."""
    global _prompts
    if _prompts is None:
        _prompts = load_prompts()
    return _prompts


def reload_prompts() -> dict:
    global _prompts
    _prompts = load_prompts()
    return _prompts


def get_loaded_sources() -> list[str]:
    return _loaded_sources


def render(name: str, correction: Optional[str] = None, **fields) -> str:
    """Fill the named template; append the adjustment text when the user asked for one."""
    prompts = get_prompts()
    text = prompts[name]["template"].format(**fields)
    if correction:
        text += prompts["correction"]["template"].format(correction=correction)
    return text
