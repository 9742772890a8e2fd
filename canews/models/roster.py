from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


class PlayerRecord(BaseModel):
    """A player on a roster.

    Only the fields that were explicitly set are serialized, so a player built
    from a bare name string is emitted as ``{"name": ...}`` while one built
    from a mapping carries every field (null when absent).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    number: Optional[Union[int, float, str]] = None
    position: Optional[str] = None
    grade: Optional[Union[int, float, str]] = None


class CoachRecord(BaseModel):
    """A coach on a roster. Serialized like PlayerRecord."""

    model_config = ConfigDict(frozen=True)

    name: str
    role: Optional[str] = None
    email: Optional[str] = None


class RosterEntry(BaseModel):
    """All coaches and players for one sport (and season, when known)."""

    model_config = ConfigDict(frozen=True)

    sport: str
    season: Optional[str] = None
    coaches: List[CoachRecord] = []
    players: List[PlayerRecord] = []
