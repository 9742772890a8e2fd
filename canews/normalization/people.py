from typing import Any, List

from loguru import logger

from canews.models.roster import CoachRecord, PlayerRecord
from canews.normalization import aliases
from canews.normalization.fields import extract_scalar, extract_text


def _player_from_mapping(raw: dict) -> PlayerRecord:
    return PlayerRecord(
        name=extract_text(raw, aliases.PLAYER_NAME, aliases.DEFAULT_PLAYER_NAME),
        number=extract_scalar(raw, aliases.PLAYER_NUMBER),
        position=extract_text(raw, aliases.PLAYER_POSITION),
        grade=extract_scalar(raw, aliases.PLAYER_GRADE),
    )


def _coach_from_mapping(raw: dict) -> CoachRecord:
    return CoachRecord(
        name=extract_text(raw, aliases.COACH_NAME, aliases.DEFAULT_COACH_NAME),
        role=extract_text(raw, aliases.COACH_ROLE),
        email=extract_text(raw, aliases.COACH_EMAIL),
    )


def _player(element: Any) -> PlayerRecord:
    if isinstance(element, str):
        return PlayerRecord(name=element)
    if isinstance(element, dict):
        return _player_from_mapping(element)
    return PlayerRecord(name=aliases.DEFAULT_PLAYER_NAME)


def _coach(element: Any) -> CoachRecord:
    if isinstance(element, str):
        return CoachRecord(name=element)
    if isinstance(element, dict):
        return _coach_from_mapping(element)
    return CoachRecord(name=aliases.DEFAULT_COACH_NAME)


def normalize_players(raw: Any) -> List[PlayerRecord]:
    """Turns a raw 'players'/'roster' value of any shape into PlayerRecords."""
    if raw is None:
        return []
    if isinstance(raw, list):
        return [_player(element) for element in raw]
    if isinstance(raw, (str, dict)):
        return [_player(raw)]
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return [PlayerRecord(name=str(raw))]
    logger.debug(f"Unrecognized players value of type {type(raw).__name__}")
    return []


def normalize_coaches(raw: Any) -> List[CoachRecord]:
    """Turns a raw 'coaches'/'coach' value of any shape into CoachRecords."""
    if raw is None:
        return []
    if isinstance(raw, list):
        return [_coach(element) for element in raw]
    if isinstance(raw, (str, dict)):
        return [_coach(raw)]
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return [CoachRecord(name=str(raw))]
    logger.debug(f"Unrecognized coaches value of type {type(raw).__name__}")
    return []
