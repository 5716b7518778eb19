"""Trello REST API client (board lists and cards)."""

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

from geeto.config.credentials import TrelloConfig
from geeto.models.core import TrelloCard
from geeto.ui.output import error

TRELLO_API_URL = "https://api.trello.com/1"
CARD_FIELDS = "id,name,desc,idShort,shortLink,url,idList"
HIDDEN_MARKERS = ("[DONE]", "[ARCHIVED]")


def trello_api(config: TrelloConfig, endpoint: str, params: Optional[dict] = None) -> Optional[list]:
    """GET a Trello endpoint returning a JSON array. Returns None on error."""
    query = {"key": config.api_key, "token": config.token, **(params or {})}
    url = f"{TRELLO_API_URL}{endpoint}?{urllib.parse.urlencode(query)}"
    try:
        with urllib.request.urlopen(url, timeout=30) as resp:  # nosemgrep: dynamic-urllib-use-detected
            data = json.loads(resp.read())
    except urllib.error.HTTPError as e:
        error(f"Trello API HTTP {e.code}: {e.reason}")
        return None
    except urllib.error.URLError as e:
        error(f"Trello API connection error: {e.reason}")
        return None
    except (json.JSONDecodeError, TimeoutError) as e:
        error(f"Trello API error: {e}")
        return None
    return data if isinstance(data, list) else None


def fetch_lists(config: TrelloConfig) -> list[dict]:
    """Board lists as [{id, name}]."""
    data = trello_api(config, f"/boards/{config.board_id}/lists")
    if not data:
        return []
    return [{"id": lst["id"], "name": lst.get("name", "")} for lst in data if "id" in lst]


def fetch_cards(config: TrelloConfig, list_id: Optional[str] = None) -> list[TrelloCard]:
    """Open cards on the board (or one list), minus those marked [DONE]/[ARCHIVED]."""
    data = trello_api(config, f"/boards/{config.board_id}/cards", {"fields": CARD_FIELDS})
    if not data:
        return []
    cards = []
    for raw in data:
        if "id" not in raw:
            continue
        card = TrelloCard.from_dict(raw)
        if list_id and card.list_id != list_id:
            continue
        if any(marker in card.name.upper() for marker in HIDDEN_MARKERS):
            continue
        cards.append(card)
    return cards
