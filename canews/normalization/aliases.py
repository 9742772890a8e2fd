"""Alias chains for every field the normalizer reads.

Upstream documents are produced by several scrapers and manual entry, and the
same field shows up under different names. Each tuple lists the candidate keys
in the order they are tried; the first present, non-empty value wins. This
module is the only place where those names live.
"""

from typing import Tuple

AliasChain = Tuple[str, ...]

DOCUMENT_ID: AliasChain = ("_id", "id")

# --- Titles ---
SPORTS_TITLE: AliasChain = ("event", "event_name", "eventName")
GENERAL_TITLE: AliasChain = ("title", "event", "event_name", "eventName", "name")
ACADEMIC_TITLE: AliasChain = ("event", "title", "name", "event_name", "eventName")
FLAT_TITLE: AliasChain = ("title", "name", "event", "event_name")
ARTICLE_TITLE: AliasChain = ("title",)
RESULT_TITLE: AliasChain = ("event", "title", "name", "event_name", "eventName")
LOOKUP_TITLE: AliasChain = ("title", "event", "event_name", "eventName")

# --- Sports fields ---
SPORT: AliasChain = ("sport", "sport_name", "sportName")
TEAM: AliasChain = ("team", "team_name", "teamName")
OPPONENT: AliasChain = ("opponent",)
TIME: AliasChain = ("time",)
LOCATION: AliasChain = ("venue", "location")
VENUE: AliasChain = ("venue",)
AUTHOR: AliasChain = ("author",)
IMAGE_NAME: AliasChain = ("imageName", "image_name", "image")
CONTENT: AliasChain = ("content", "description")
SEASON: AliasChain = ("season", "Season", "season_name", "seasonName", "year")

# --- General / academic fields ---
DATE: AliasChain = ("date",)
LINK: AliasChain = ("link", "url", "href")
PLAIN_LOCATION: AliasChain = ("location", "venue")
CATEGORY: AliasChain = ("Category", "category")
DAY_RANGE: AliasChain = ("day", "dayRange", "day_range")

# --- Results fields ---
DAY: AliasChain = ("day",)
PLAYER: AliasChain = ("player", "player_name", "playerName", "athlete")
RESULT: AliasChain = ("result", "outcome", "Result")
SCORE: AliasChain = ("score", "final_score", "finalScore")

# --- Roster fields ---
ROSTER_SPORT: AliasChain = ("sport", "sport_name", "sportName", "name", "title")
COACH_LIST: AliasChain = ("coaches", "coach")
PLAYER_LIST: AliasChain = ("players", "roster")

PLAYER_NAME: AliasChain = ("name", "player_name", "playerName")
PLAYER_NUMBER: AliasChain = ("number", "jersey", "jerseyNumber")
PLAYER_POSITION: AliasChain = ("position", "pos")
PLAYER_GRADE: AliasChain = ("grade", "gradeLevel")

COACH_NAME: AliasChain = ("name", "coach_name", "coachName")
COACH_ROLE: AliasChain = ("role", "position")
COACH_EMAIL: AliasChain = ("email",)

# --- Defaults ---
DEFAULT_TITLE = "Untitled Event"
DEFAULT_SPORT = "General"
DEFAULT_ROSTER_SPORT = "Unknown Sport"
DEFAULT_PLAYER_NAME = "Unknown"
DEFAULT_COACH_NAME = "Unknown Coach"
