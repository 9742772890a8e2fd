from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CanonicalEvent(BaseModel):
    """A sports event as served to the mobile client."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str  # '{doc_id}_{n}' for list responses, the document id for lookups
    title: str
    content: str = ""
    sport: str
    opponent: Optional[str] = None
    # Raw group/event date passed through verbatim (e.g. "2024-12-27")
    date: str
    time: Optional[str] = None
    location: Optional[str] = None
    venue: Optional[str] = None
    author: Optional[str] = None
    image_name: Optional[str] = Field(None, serialization_alias="imageName")
    team: Optional[str] = None
    season: Optional[str] = None


class CanonicalGeneralEvent(BaseModel):
    """A news item or general school event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    date: str  # Normalized ISO-8601 UTC timestamp
    link: Optional[str] = None


class CanonicalAcademicEvent(BaseModel):
    """An academic calendar entry, keeping the original range strings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    date: str  # Normalized start of the range
    date_range: Optional[str] = Field(None, serialization_alias="dateRange")
    day_range: Optional[str] = Field(None, serialization_alias="dayRange")
    location: Optional[str] = None
    category: Optional[str] = None
    link: Optional[str] = None
