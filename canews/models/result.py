from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class CanonicalResult(BaseModel):
    """A game or meet result."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    sport: str
    season: Optional[str] = None
    date: str  # Normalized ISO-8601 UTC timestamp
    day: Optional[str] = None
    location: Optional[str] = None
    opponent: Optional[str] = None
    player: Optional[str] = None
    result: Optional[str] = None
    # Scores arrive as "3-1" strings or bare numbers
    score: Optional[Union[int, float, str]] = None
    link: Optional[str] = None
