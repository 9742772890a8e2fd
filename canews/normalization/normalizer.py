import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, ValidationError

from canews.models.enums import Domain, SportsDatePolicy
from canews.models.event import (
    CanonicalAcademicEvent,
    CanonicalEvent,
    CanonicalGeneralEvent,
)
from canews.models.result import CanonicalResult
from canews.models.roster import RosterEntry
from canews.normalization import aliases
from canews.normalization.dates import (
    DEFAULT_WINDOW_DAYS,
    normalize_date,
    to_iso,
    utc_now,
)
from canews.normalization.fields import (
    extract_field,
    extract_scalar,
    extract_text,
    first_present,
    is_present,
)
from canews.normalization.ordering import filter_upcoming, sort_by_date
from canews.normalization.people import normalize_coaches, normalize_players
from canews.normalization.roster_builder import RosterBuilder, roster_key
from canews.normalization.shapes import (
    GENERAL_MARKERS,
    RESULT_MARKERS,
    SPORTS_MARKERS,
    GroupRecord,
    iter_group_records,
)
from canews.utils.misc_utils import IdSequence, document_id

RawDocument = Dict[str, Any]
Parent = Optional[Dict[str, Any]]

# "Basketball (JV Boys)"
PARENTHETICAL_TEAM = re.compile(r"^([^(]+)\(([^)]+)\)")
# "Soccer - Varsity Girls"; sport and team are the first two hyphen segments
TITLE_SEPARATOR = "-"

SPORTS_GROUPING_KEYS = ("upcoming_events", "events")
RESULTS_GROUPING_KEYS = ("events", "results")


class NormalizationError(Exception):
    """Raised when raw documents cannot be turned into canonical records at all."""

    pass


def split_event_title(title: str) -> Tuple[str, Optional[str]]:
    """Splits an event title into (sport, team).

    "Basketball (JV Boys)" and "Soccer - Varsity Girls" carry the team in the
    title. With several hyphens ("Track - Varsity - Boys") the team is the
    second segment only. Anything else is taken whole as the sport.
    """
    text = title.strip()
    match = PARENTHETICAL_TEAM.match(text)
    if match:
        sport, team = match.group(1).strip(), match.group(2).strip()
        if sport and team:
            return sport, team

    segments = [segment.strip() for segment in text.split(TITLE_SEPARATOR)]
    if len(segments) >= 2 and segments[0] and segments[1]:
        return segments[0], segments[1]
    return text, None


def _grouping_list(document: RawDocument, keys: Sequence[str]) -> Optional[List[Any]]:
    for key in keys:
        value = document.get(key)
        if isinstance(value, list) and value:
            return value
    return None


class Normalizer:
    """Turns raw, loosely structured documents into canonical records per domain."""

    def __init__(
        self,
        sports_policy: SportsDatePolicy = SportsDatePolicy.UPCOMING,
        window_days: int = DEFAULT_WINDOW_DAYS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.sports_policy = sports_policy
        self.window_days = window_days
        self._clock = clock
        logger.info(
            f"Normalizer initialized (sports policy: {sports_policy.value}, "
            f"assumed-year window: {window_days} days)."
        )

    def normalize(self, domain: Domain, documents: Iterable[Any]) -> Sequence[BaseModel]:
        """Normalizes one domain's raw documents into its canonical records."""
        handlers: Dict[Domain, Callable[[Iterable[Any]], Sequence[BaseModel]]] = {
            Domain.SPORTS: self.normalize_sports,
            Domain.GENERAL: self.normalize_general,
            Domain.ACADEMIC: self.normalize_academic,
            Domain.RESULTS: self.normalize_results,
            Domain.ROSTER: self.normalize_roster,
        }
        handler = handlers.get(domain)
        if handler is None:
            raise NormalizationError(f"No normalizer for domain: {domain}")
        return handler(documents)

    # ------------------------------------------------------------------
    # Shared walking / isolation
    # ------------------------------------------------------------------

    def _collect(
        self,
        domain: Domain,
        documents: Iterable[Any],
        extract_document: Callable[[RawDocument, str], Iterator[BaseModel]],
    ) -> List[BaseModel]:
        """Runs ``extract_document`` on every document, isolating failures.

        A document that raises is logged and skipped; records it produced
        before failing are kept.
        """
        records: List[BaseModel] = []
        document_count = 0
        for index, document in enumerate(documents):
            document_count += 1
            if not isinstance(document, dict):
                logger.warning(
                    f"Skipping {domain.value} document {index}: expected a mapping, got {type(document).__name__}"
                )
                continue
            doc_id = document_id(document)
            try:
                for record in extract_document(document, doc_id):
                    records.append(record)
            except Exception as e:
                logger.exception(f"Error normalizing {domain.value} document {doc_id}: {e}")
                continue

        logger.info(
            f"Extracted {len(records)} {domain.value} records from {document_count} document(s)."
        )
        return records

    def _build_each(
        self,
        domain: Domain,
        doc_id: str,
        pairs: Iterable[GroupRecord],
        build: Callable[[Dict[str, Any], Parent], BaseModel],
    ) -> Iterator[BaseModel]:
        """Builds one canonical record per (record, parent) pair, skipping bad ones."""
        for record, parent in pairs:
            try:
                canonical = build(record, parent)
            except Exception as e:
                logger.exception(
                    f"Skipping malformed {domain.value} record in document {doc_id}: {e}"
                )
                logger.debug(f"Problematic record data: {record}")
                continue
            yield canonical

    @staticmethod
    def _mapping_items(items: Iterable[Any]) -> Iterator[GroupRecord]:
        for item in items:
            if isinstance(item, dict):
                yield item, None
            else:
                logger.debug(f"Skipping non-mapping item of type {type(item).__name__}")

    @staticmethod
    def _season(*sources: Any) -> Optional[str]:
        """First season found, most specific source first."""
        return first_present(*(extract_text(source, aliases.SEASON) for source in sources))

    # ------------------------------------------------------------------
    # Sports
    # ------------------------------------------------------------------

    def normalize_sports(self, documents: Iterable[Any]) -> List[CanonicalEvent]:
        now = self._clock()
        ids = IdSequence()

        def extract_document(document: RawDocument, doc_id: str) -> Iterator[BaseModel]:
            groups = _grouping_list(document, SPORTS_GROUPING_KEYS)
            if groups is None:
                logger.debug(f"Sports document {doc_id} has no upcoming_events list, skipping")
                return
            yield from self._build_each(
                Domain.SPORTS,
                doc_id,
                iter_group_records(groups, SPORTS_MARKERS),
                lambda record, parent: self._sports_event(
                    record, parent, document, ids.next_id(doc_id), now
                ),
            )

        events = self._collect(Domain.SPORTS, documents, extract_document)

        if self.sports_policy == SportsDatePolicy.UPCOMING:
            events = filter_upcoming(events, now, self.window_days)
        events = sort_by_date(events, now, descending=False, window_days=self.window_days)
        logger.info(f"Returning {len(events)} sports events ({self.sports_policy.value}).")
        return events

    def _sports_event(
        self,
        record: Dict[str, Any],
        parent: Parent,
        document: RawDocument,
        record_id: str,
        now: datetime,
    ) -> CanonicalEvent:
        title = extract_text(record, aliases.SPORTS_TITLE)
        sport = extract_text(record, aliases.SPORT)
        team = extract_text(record, aliases.TEAM)

        if sport is None:
            if title:
                sport, parsed_team = split_event_title(title)
                team = team or parsed_team
            else:
                sport = aliases.DEFAULT_SPORT

        # Container children take the group's date; their own is a fallback
        date = first_present(
            extract_text(parent, aliases.DATE), extract_text(record, aliases.DATE)
        )

        return CanonicalEvent(
            id=record_id,
            title=title or aliases.DEFAULT_TITLE,
            content=extract_text(record, aliases.CONTENT, ""),
            sport=sport,
            opponent=extract_text(record, aliases.OPPONENT),
            date=date or to_iso(now),
            time=extract_text(record, aliases.TIME),
            location=extract_text(record, aliases.LOCATION),
            venue=extract_text(record, aliases.VENUE),
            author=extract_text(record, aliases.AUTHOR),
            image_name=extract_text(record, aliases.IMAGE_NAME),
            team=team,
            season=self._season(record, parent, document),
        )

    def normalize_sports_document(self, document: RawDocument) -> CanonicalEvent:
        """Maps a single flat sports document (lookup by id) to a CanonicalEvent."""
        now = self._clock()
        try:
            return CanonicalEvent(
                id=document_id(document),
                title=extract_text(document, aliases.LOOKUP_TITLE, aliases.DEFAULT_TITLE),
                content=extract_text(document, aliases.CONTENT, ""),
                sport=extract_text(document, aliases.SPORT, aliases.DEFAULT_SPORT),
                opponent=extract_text(document, aliases.OPPONENT),
                date=extract_text(document, aliases.DATE) or to_iso(now),
                time=extract_text(document, aliases.TIME),
                location=extract_text(document, aliases.PLAIN_LOCATION),
                venue=extract_text(document, aliases.VENUE),
                author=extract_text(document, aliases.AUTHOR),
                image_name=extract_text(document, aliases.IMAGE_NAME),
                team=extract_text(document, aliases.TEAM),
                season=self._season(document),
            )
        except ValidationError as e:
            raise NormalizationError(f"Invalid sports document: {e}") from e

    # ------------------------------------------------------------------
    # General
    # ------------------------------------------------------------------

    def normalize_general(self, documents: Iterable[Any]) -> List[CanonicalGeneralEvent]:
        now = self._clock()
        ids = IdSequence()

        def extract_document(document: RawDocument, doc_id: str) -> Iterator[BaseModel]:
            def build(title_aliases: Sequence[str]):
                return lambda record, parent: self._general_event(
                    record, parent, title_aliases, ids.next_id(doc_id), now
                )

            yield from self._extract_listing(Domain.GENERAL, document, doc_id, build)

        events = self._collect(Domain.GENERAL, documents, extract_document)
        return sort_by_date(events, now, descending=True, window_days=self.window_days)

    def _general_event(
        self,
        record: Dict[str, Any],
        parent: Parent,
        title_aliases: Sequence[str],
        record_id: str,
        now: datetime,
    ) -> CanonicalGeneralEvent:
        raw_date = first_present(
            extract_field(parent, aliases.DATE), extract_field(record, aliases.DATE)
        )
        return CanonicalGeneralEvent(
            id=record_id,
            title=extract_text(record, title_aliases, aliases.DEFAULT_TITLE),
            date=normalize_date(raw_date, now, self.window_days),
            link=extract_text(record, aliases.LINK),
        )

    def _extract_listing(
        self,
        domain: Domain,
        document: RawDocument,
        doc_id: str,
        build: Callable[[Sequence[str]], Callable[[Dict[str, Any], Parent], BaseModel]],
    ) -> Iterator[BaseModel]:
        """The articles -> upcoming_events -> flat document cascade."""
        articles = document.get("articles")
        if isinstance(articles, list):
            yield from self._build_each(
                domain, doc_id, self._mapping_items(articles), build(aliases.ARTICLE_TITLE)
            )
            return

        upcoming = document.get("upcoming_events")
        if isinstance(upcoming, list):
            yield from self._build_each(
                domain,
                doc_id,
                iter_group_records(upcoming, GENERAL_MARKERS),
                build(aliases.GENERAL_TITLE),
            )
            return

        if extract_field(document, aliases.FLAT_TITLE) is not None:
            yield from self._build_each(
                domain, doc_id, [(document, None)], build(aliases.FLAT_TITLE)
            )
        else:
            logger.debug(f"{domain.value} document {doc_id} has no recognizable shape, skipping")

    # ------------------------------------------------------------------
    # Academic
    # ------------------------------------------------------------------

    def normalize_academic(self, documents: Iterable[Any]) -> List[CanonicalAcademicEvent]:
        now = self._clock()
        ids = IdSequence()

        def extract_document(document: RawDocument, doc_id: str) -> Iterator[BaseModel]:
            def build(title_aliases: Sequence[str]):
                return lambda record, parent: self._academic_event(
                    record, parent, title_aliases, ids.next_id(doc_id), now
                )

            items = document.get("events")
            if isinstance(items, list):
                yield from self._build_each(
                    Domain.ACADEMIC,
                    doc_id,
                    iter_group_records(items, GENERAL_MARKERS, lenient=True),
                    build(aliases.ACADEMIC_TITLE),
                )
                return
            yield from self._extract_listing(Domain.ACADEMIC, document, doc_id, build)

        events = self._collect(Domain.ACADEMIC, documents, extract_document)
        return sort_by_date(events, now, descending=True, window_days=self.window_days)

    def _academic_event(
        self,
        record: Dict[str, Any],
        parent: Parent,
        title_aliases: Sequence[str],
        record_id: str,
        now: datetime,
    ) -> CanonicalAcademicEvent:
        # Kept verbatim as dateRange; "02-14 to 02-16" style values are common
        date_range = first_present(
            extract_text(parent, aliases.DATE), extract_text(record, aliases.DATE)
        )
        return CanonicalAcademicEvent(
            id=record_id,
            title=extract_text(record, title_aliases, aliases.DEFAULT_TITLE),
            date=normalize_date(date_range, now, self.window_days),
            date_range=date_range,
            day_range=first_present(
                extract_text(record, aliases.DAY_RANGE),
                extract_text(parent, aliases.DAY_RANGE),
            ),
            location=extract_text(record, aliases.PLAIN_LOCATION),
            category=extract_text(record, aliases.CATEGORY),
            link=extract_text(record, aliases.LINK),
        )

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def normalize_results(self, documents: Iterable[Any]) -> List[CanonicalResult]:
        now = self._clock()
        ids = IdSequence()

        def extract_document(document: RawDocument, doc_id: str) -> Iterator[BaseModel]:
            def _build(record: Dict[str, Any], parent: Parent) -> CanonicalResult:
                return CanonicalResult(
                    id=ids.next_id(doc_id),
                    title=extract_text(record, aliases.RESULT_TITLE, aliases.DEFAULT_TITLE),
                    sport=first_present(
                        extract_text(record, aliases.SPORT),
                        extract_text(parent, aliases.SPORT),
                        extract_text(document, aliases.SPORT),
                    )
                    or aliases.DEFAULT_SPORT,
                    season=self._season(record, parent, document),
                    date=normalize_date(
                        first_present(
                            extract_field(record, aliases.DATE),
                            extract_field(parent, aliases.DATE),
                        ),
                        now,
                        self.window_days,
                    ),
                    day=first_present(
                        extract_text(record, aliases.DAY), extract_text(parent, aliases.DAY)
                    ),
                    location=extract_text(record, aliases.PLAIN_LOCATION),
                    opponent=extract_text(record, aliases.OPPONENT),
                    player=extract_text(record, aliases.PLAYER),
                    result=extract_text(record, aliases.RESULT),
                    score=extract_scalar(record, aliases.SCORE),
                    link=extract_text(record, aliases.LINK),
                )

            items = _grouping_list(document, RESULTS_GROUPING_KEYS)
            if items is not None:
                pairs = iter_group_records(items, RESULT_MARKERS, lenient=True)
            elif any(is_present(document.get(key)) for key in RESULT_MARKERS):
                pairs = iter([(document, None)])
            else:
                logger.debug(f"Results document {doc_id} has no recognizable shape, skipping")
                return
            yield from self._build_each(Domain.RESULTS, doc_id, pairs, _build)

        results = self._collect(Domain.RESULTS, documents, extract_document)
        return sort_by_date(results, now, descending=True, window_days=self.window_days)

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def normalize_roster(self, documents: Iterable[Any]) -> List[RosterEntry]:
        builder = RosterBuilder()
        team_count = 0

        for index, document in enumerate(documents):
            if not isinstance(document, dict):
                logger.warning(
                    f"Skipping roster document {index}: expected a mapping, got {type(document).__name__}"
                )
                continue
            doc_id = document_id(document)
            try:
                for sport, team in self._iter_teams(document):
                    if not isinstance(team, dict):
                        logger.warning(
                            f"Skipping team '{sport}' in roster document {doc_id}: "
                            f"expected a mapping, got {type(team).__name__}"
                        )
                        continue
                    try:
                        entry = self._roster_entry(sport, team, document)
                    except Exception as e:
                        logger.exception(
                            f"Skipping malformed team '{sport}' in roster document {doc_id}: {e}"
                        )
                        continue
                    builder.upsert(roster_key(entry.sport, entry.season), entry)
                    team_count += 1
            except Exception as e:
                logger.exception(f"Error normalizing roster document {doc_id}: {e}")
                continue

        entries = list(builder.build())
        logger.info(f"Merged {team_count} team record(s) into {len(entries)} roster entries.")
        return entries

    def _iter_teams(self, document: RawDocument) -> Iterator[Tuple[str, Any]]:
        teams = document.get("teams")
        if isinstance(teams, dict):
            # Keys are sport names
            for sport_name, team in teams.items():
                yield str(sport_name), team
        elif isinstance(teams, list):
            for team in teams:
                sport = extract_text(team, aliases.ROSTER_SPORT, aliases.DEFAULT_ROSTER_SPORT)
                yield sport, team
        else:
            # The document itself is one team
            yield extract_text(
                document, aliases.ROSTER_SPORT, aliases.DEFAULT_ROSTER_SPORT
            ), document

    def _roster_entry(
        self, sport: str, team: Dict[str, Any], document: RawDocument
    ) -> RosterEntry:
        season = self._season(team) if team is document else self._season(team, document)
        return RosterEntry(
            sport=sport,
            season=season,
            coaches=normalize_coaches(extract_field(team, aliases.COACH_LIST)),
            players=normalize_players(extract_field(team, aliases.PLAYER_LIST)),
        )
