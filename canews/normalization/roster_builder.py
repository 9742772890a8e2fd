from typing import Dict, Optional, Tuple

from loguru import logger

from canews.models.roster import RosterEntry

RosterKey = Tuple[str, Optional[str]]


def roster_key(sport: str, season: Optional[str]) -> RosterKey:
    """Merge key: the sport alone when season is unknown, else sport + season."""
    return (sport, season or None)


class RosterBuilder:
    """Accumulates roster entries, merging those that share a key.

    Merging concatenates coach and player lists in arrival order. Identical
    people are kept twice; nothing is overwritten.
    """

    def __init__(self) -> None:
        self._entries: Dict[RosterKey, RosterEntry] = {}

    def upsert(self, key: RosterKey, entry: RosterEntry) -> RosterEntry:
        existing = self._entries.get(key)
        if existing is None:
            self._entries[key] = entry
            return entry

        merged = RosterEntry(
            sport=existing.sport,
            season=existing.season,
            coaches=[*existing.coaches, *entry.coaches],
            players=[*existing.players, *entry.players],
        )
        logger.debug(
            f"Merged roster for {key}: {len(merged.coaches)} coaches, {len(merged.players)} players"
        )
        self._entries[key] = merged
        return merged

    def __len__(self) -> int:
        return len(self._entries)

    def build(self) -> Tuple[RosterEntry, ...]:
        return tuple(self._entries.values())
