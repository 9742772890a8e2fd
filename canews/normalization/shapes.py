from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Literal, Optional, Tuple, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from canews.models.enums import GroupKind

EVENTS_KEY = "events"

SPORTS_MARKERS: FrozenSet[str] = frozenset(
    {"event", "event_name", "eventName", "sport", "team", "opponent", "time"}
)
GENERAL_MARKERS: FrozenSet[str] = frozenset(
    {"event", "event_name", "eventName", "title", "name"}
)
RESULT_MARKERS: FrozenSet[str] = frozenset({"event", "title", "sport"})


class SelfEvent(BaseModel):
    """A group that is itself one record: {date, day, event, sport, ...}."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[GroupKind.SELF] = GroupKind.SELF
    record: Dict[str, Any]


class ContainerGroup(BaseModel):
    """A group holding child records: {date, day, events: [...]}."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[GroupKind.CONTAINER] = GroupKind.CONTAINER
    group: Dict[str, Any]
    events: List[Any]


GroupShape = Union[SelfEvent, ContainerGroup]

# (record, nearest enclosing container or None)
GroupRecord = Tuple[Dict[str, Any], Optional[Dict[str, Any]]]


def classify_group(
    group: Any, markers: FrozenSet[str], lenient: bool = False
) -> Optional[GroupShape]:
    """Decides whether a group is one record or a container of records.

    The rule is local to the group and driven by key presence only:
    marker keys without an ``events`` list mean SELF, an ``events`` list means
    CONTAINER, and anything else yields nothing. With ``lenient`` set, a
    mapping with neither is still taken as SELF; flat item lists use this.
    """
    if not isinstance(group, dict):
        return None

    nested = group.get(EVENTS_KEY)
    has_events_list = isinstance(nested, list)
    has_markers = not markers.isdisjoint(group.keys())

    if has_markers and not has_events_list:
        return SelfEvent(record=group)
    if has_events_list:
        return ContainerGroup(group=group, events=nested)
    if lenient:
        return SelfEvent(record=group)
    return None


def _descend(
    shape: GroupShape, markers: FrozenSet[str], parent: Optional[Dict[str, Any]]
) -> Iterator[GroupRecord]:
    if isinstance(shape, SelfEvent):
        yield shape.record, parent
        return

    for child in shape.events:
        if not isinstance(child, dict):
            logger.debug(f"Skipping non-mapping child of type {type(child).__name__}")
            continue
        # Children of a container are records unless they nest further
        child_shape = classify_group(child, markers, lenient=True)
        if isinstance(child_shape, ContainerGroup):
            yield from _descend(child_shape, markers, child_shape.group)
        else:
            yield child, shape.group


def iter_group_records(
    groups: Iterable[Any], markers: FrozenSet[str], lenient: bool = False
) -> Iterator[GroupRecord]:
    """Walks groups depth-first, yielding every record with its parent group."""
    for index, group in enumerate(groups):
        shape = classify_group(group, markers, lenient=lenient)
        if shape is None:
            logger.debug(f"Group {index} has no event markers or events list, skipping")
            continue
        yield from _descend(shape, markers, None)
