"""AI provider clients for branch names and commit messages.

Every client degrades to None on failure so the wizard can fall back to manual entry.
"""

import json
import shutil
import subprocess
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

from geeto.config.credentials import GeminiConfig, OpenRouterConfig
from geeto.config.prompts import render
from geeto.models.core import AIProvider
from geeto.ui.output import error, warn

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_OPENROUTER_MODEL = "allenai/olmo-3.1-32b-instruct"
DEFAULT_COPILOT_MODEL = "claude-haiku-4.5"

GEMINI_ATTEMPTS = 3
MAX_PROMPT_FILES = 15

OPENROUTER_ERRORS = {
    400: "Bad request. Please check your request parameters.",
    401: "Invalid API key. Please check your OpenRouter configuration.",
    402: "Insufficient credits. Check your balance at https://openrouter.ai/",
    403: "Access forbidden. Please check your OpenRouter account permissions.",
    404: "Model not found. The selected model may not be available.",
    429: "Rate limit exceeded. Please wait a moment before trying again.",
}


class AIClient:
    """Capability interface shared by all providers."""

    name = "ai"

    def is_available(self) -> bool:
        return True

    def generate(self, prompt: str) -> Optional[str]:
        raise NotImplementedError

    def generate_branch_name(
        self, prefix: str, diff: str, files: list[str], correction: Optional[str] = None
    ) -> Optional[str]:
        prompt = render(
            "branch_name",
            correction=correction,
            prefix=prefix,
            files=", ".join(files[:MAX_PROMPT_FILES]),
            diff=diff,
        )
        return self.generate(prompt)

    def generate_branch_from_title(self, title: str, correction: Optional[str] = None) -> Optional[str]:
        return self.generate(render("branch_from_title", correction=correction, title=title))

    def generate_commit_message(self, diff: str, correction: Optional[str] = None) -> Optional[str]:
        return self.generate(render("commit_message", correction=correction, diff=diff))


class UnavailableClient(AIClient):
    """Null provider: never suggests anything."""

    name = "manual"

    def is_available(self) -> bool:
        return False

    def generate(self, prompt: str) -> Optional[str]:
        return None


def _post_json(url: str, payload: dict, headers: dict) -> dict:
    """POST JSON and decode the reply. HTTP/URL errors propagate to the caller."""
    req = urllib.request.Request(
        url,
        data=json.dumps(payload).encode(),
        headers={"Content-Type": "application/json", **headers},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=60) as resp:  # nosemgrep: dynamic-urllib-use-detected
        return json.loads(resp.read())


class GeminiClient(AIClient):
    name = "gemini"

    def __init__(self, api_key: str, model: str = DEFAULT_GEMINI_MODEL, attempts: int = GEMINI_ATTEMPTS):
        self.api_key = api_key
        self.model = model
        self.attempts = attempts

    def generate(self, prompt: str) -> Optional[str]:
        url = GEMINI_API_URL.format(model=self.model) + "?" + urllib.parse.urlencode({"key": self.api_key})
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.8, "maxOutputTokens": 256},
        }
        for attempt in range(1, self.attempts + 1):
            try:
                data = _post_json(url, payload, {})
            except urllib.error.HTTPError as e:
                if e.code == 429 and attempt < self.attempts:
                    wait = attempt * 5
                    warn(f"Gemini rate limited. Waiting {wait}s... (attempt {attempt}/{self.attempts})")
                    time.sleep(wait)
                    continue
                warn(f"Gemini API HTTP {e.code}: {e.reason}")
                return None
            except urllib.error.URLError as e:
                error(f"Gemini API connection error: {e.reason}")
                return None
            except (json.JSONDecodeError, TimeoutError) as e:
                error(f"Gemini API error: {e}")
                return None

            if data.get("error"):
                error(f"Gemini API error: {data['error'].get('message', data['error'])}")
                return None
            try:
                return data["candidates"][0]["content"]["parts"][0]["text"].strip()
            except (KeyError, IndexError, TypeError):
                warn("Gemini returned no text")
                return None
        return None


class OpenRouterClient(AIClient):
    name = "openrouter"

    def __init__(self, api_key: str, model: str = DEFAULT_OPENROUTER_MODEL):
        self.api_key = api_key
        self.model = model

    def generate(self, prompt: str) -> Optional[str]:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": 150,
            "temperature": 0.7,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "X-Title": "geeto"}
        try:
            data = _post_json(OPENROUTER_API_URL, payload, headers)
        except urllib.error.HTTPError as e:
            if e.code >= 500:
                reason = f"Server error ({e.code}). Please try again later."
            else:
                reason = OPENROUTER_ERRORS.get(e.code, f"{e.code} - {e.reason}")
            warn(f"OpenRouter API error: {reason}")
            return None
        except urllib.error.URLError as e:
            warn(f"OpenRouter connection error: {e.reason}")
            return None
        except (json.JSONDecodeError, TimeoutError) as e:
            warn(f"OpenRouter API call failed: {e}")
            return None
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return content.strip() if content else None


class CopilotClient(AIClient):
    """GitHub Copilot through its CLI (`copilot -p <prompt> --model <m>`)."""

    name = "copilot"

    def __init__(self, model: str = DEFAULT_COPILOT_MODEL, binary: str = "copilot"):
        self.model = model
        self.binary = binary

    def is_available(self) -> bool:
        if shutil.which(self.binary) is None:
            return False
        try:
            result = subprocess.run([self.binary, "--version"], capture_output=True, text=True, timeout=15)
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def generate(self, prompt: str) -> Optional[str]:
        cmd = [self.binary, "-p", prompt, "--model", self.model]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=120)
        except (OSError, subprocess.TimeoutExpired) as e:
            warn(f"Copilot CLI failed: {e}")
            return None
        if result.returncode != 0:
            error(f"Copilot CLI exited with code {result.returncode}")
            if result.stderr:
                error(f"stderr: {result.stderr[:500]}")
            return None
        return result.stdout.strip() or None


def build_ai_client(provider: Optional[str], settings: Optional[dict] = None) -> AIClient:
    """Client for the named provider, or the null client when it cannot be used."""
    models = (settings or {}).get("ai", {}).get("models", {})
    choice = AIProvider.parse(provider)

    if choice == AIProvider.GEMINI:
        gemini = GeminiConfig.load()
        if gemini:
            return GeminiClient(gemini.api_key, gemini.model or models.get("gemini") or DEFAULT_GEMINI_MODEL)
        warn("Gemini API key not found (run `geeto init` or set GEMINI_API_KEY)")
    elif choice == AIProvider.OPENROUTER:
        openrouter = OpenRouterConfig.load()
        if openrouter:
            return OpenRouterClient(
                openrouter.api_key,
                openrouter.model or models.get("openrouter") or DEFAULT_OPENROUTER_MODEL,
            )
        warn("OpenRouter API key not found (run `geeto init` or set OPENROUTER_API_KEY)")
    elif choice == AIProvider.COPILOT:
        copilot = CopilotClient(models.get("copilot") or DEFAULT_COPILOT_MODEL)
        if copilot.is_available():
            return copilot
        warn("Copilot CLI not found; install it and run `copilot` once to sign in")
    return UnavailableClient()
