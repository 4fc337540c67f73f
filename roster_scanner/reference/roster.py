"""Known character roster."""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..core.types import Character, Rarity
from ..utils.error_handler import ConfigurationError
from ..utils.validation import validate_character_id

DEFAULT_ROSTER: Sequence[Character] = (
    Character("batman", "Batman", Rarity.LEGENDARY),
    Character("superman", "Superman", Rarity.LEGENDARY),
    Character("wonderwoman", "Wonder Woman", Rarity.LEGENDARY),
    Character("flash", "The Flash", Rarity.LEGENDARY),
    Character("greenlantern", "Green Lantern", Rarity.EPIC),
    Character("aquaman", "Aquaman", Rarity.EPIC),
    Character("cyborg", "Cyborg", Rarity.EPIC),
    Character("harleyquinn", "Harley Quinn", Rarity.EPIC),
)


def parse_character(entry: Dict) -> Character:
    """Build a ``Character`` from a ``{"id", "name", "rarity"}`` mapping."""
    try:
        rarity = Rarity(str(entry["rarity"]).strip().lower())
        return Character(validate_character_id(entry["id"]), str(entry["name"]), rarity)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            "Invalid roster entry",
            details={"entry": entry, "error": str(e)}
        )


def load_roster(path: Optional[Union[str, Path]] = None) -> List[Character]:
    """Load a roster from a JSON list, or return the built-in sample roster."""
    if path is None:
        return list(DEFAULT_ROSTER)

    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Could not read roster file: {path}",
            details={"path": str(path), "error": str(e)}
        )

    if not isinstance(payload, list):
        raise ConfigurationError(
            "Roster file must contain a JSON list",
            details={"path": str(path), "type": type(payload).__name__}
        )

    roster = [parse_character(entry) for entry in payload]
    ids = [c.id for c in roster]
    if len(set(ids)) != len(ids):
        raise ConfigurationError(
            "Roster contains duplicate character ids",
            details={"duplicates": sorted({cid for cid in ids if ids.count(cid) > 1})}
        )
    return roster


def roster_by_id(roster: Iterable[Character]) -> Dict[str, Character]:
    return {c.id: c for c in roster}
