from enum import Enum


class Domain(str, Enum):
    SPORTS = "sports"
    GENERAL = "general"
    ACADEMIC = "academic"
    RESULTS = "results"
    ROSTER = "roster"


class SportsDatePolicy(str, Enum):
    UPCOMING = "upcoming"  # Today and future events only
    ALL = "all"


class GroupKind(str, Enum):
    SELF = "self"  # The group is itself one record
    CONTAINER = "container"  # The group holds an 'events' list
