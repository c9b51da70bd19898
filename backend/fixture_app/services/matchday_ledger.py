"""
Matchday ledger: one progress record per matchday per zone.

States: PENDING -> IN_PROGRESS -> PLAYED | INCOMPLETE

- Seeding opens the first matchday and leaves every other one PENDING.
- finalize_matchday is the only mutation: it closes a matchday from its match
  statuses and, once PLAYED, unlocks the immediately following matchday if it
  is still PENDING.
- A transition into PLAYED is announced through matchday_played after commit,
  which is what standings aggregation listens to. Finalizing a matchday that is
  already PLAYED re-evaluates it without announcing it again.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlmodel import Session, select

from fixture_app.database import lock_zone, unit_of_work
from fixture_app.models.club import ClubZone
from fixture_app.models.match import FINISHED_MATCH_STATUSES, Match
from fixture_app.models.zone import Zone
from fixture_app.models.zone_matchday import MatchdayStatus, ZoneMatchday
from fixture_app.services.fixture_errors import FixtureNotFoundError

logger = logging.getLogger(__name__)

MatchdayListener = Callable[[int, int], None]


class MatchdayPlayedSignal:
    """Listeners are called with (zone_id, matchday) once a matchday is PLAYED."""

    def __init__(self):
        self._listeners: List[MatchdayListener] = []

    def connect(self, listener: MatchdayListener) -> MatchdayListener:
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def disconnect(self, listener: MatchdayListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def send(self, zone_id: int, matchday: int) -> None:
        for listener in list(self._listeners):
            try:
                listener(zone_id, matchday)
            except Exception:
                # The matchday is already committed; a failing consumer must not undo it
                logger.exception(
                    "matchday_played listener %r failed for zone %s matchday %s", listener, zone_id, matchday
                )


matchday_played = MatchdayPlayedSignal()


# ============================================================================
# Seeding (runs inside the generation transaction)
# ============================================================================


def seed_matchdays(session: Session, zone_id: int, matchdays: Iterable[int]) -> List[ZoneMatchday]:
    """
    Replace the zone's ledger with one row per matchday.

    The lowest matchday starts IN_PROGRESS, all others PENDING. Does not commit.
    """
    existing = session.exec(select(ZoneMatchday).where(ZoneMatchday.zone_id == zone_id)).all()
    for row in existing:
        session.delete(row)
    # Deletes must reach the database before the new rows hit uq_zonematchday_zone_matchday
    session.flush()

    rows: List[ZoneMatchday] = []
    for index, matchday in enumerate(sorted(set(matchdays))):
        row = ZoneMatchday(
            zone_id=zone_id,
            matchday=matchday,
            status=MatchdayStatus.IN_PROGRESS if index == 0 else MatchdayStatus.PENDING,
        )
        session.add(row)
        rows.append(row)
    return rows


# ============================================================================
# Queries
# ============================================================================


def _require_zone(session: Session, zone_id: int) -> Zone:
    zone = session.get(Zone, zone_id)
    if not zone:
        raise FixtureNotFoundError(f"Zone {zone_id} not found")
    return zone


def get_ledger_entry(session: Session, zone_id: int, matchday: int) -> Optional[ZoneMatchday]:
    return session.exec(
        select(ZoneMatchday).where(ZoneMatchday.zone_id == zone_id, ZoneMatchday.matchday == matchday)
    ).first()


def get_matchday_matches(session: Session, zone_id: int, matchday: int) -> List[Match]:
    return list(
        session.exec(
            select(Match).where(Match.zone_id == zone_id, Match.matchday == matchday).order_by(Match.id)
        ).all()
    )


def list_matchdays(session: Session, zone_id: int) -> List[ZoneMatchday]:
    _require_zone(session, zone_id)
    return list(
        session.exec(
            select(ZoneMatchday).where(ZoneMatchday.zone_id == zone_id).order_by(ZoneMatchday.matchday)
        ).all()
    )


def get_matchday_summary(session: Session, zone_id: int, matchday: int) -> Dict[str, Any]:
    """Ledger status plus match counts and the clubs resting that matchday."""
    _require_zone(session, zone_id)
    matches = get_matchday_matches(session, zone_id, matchday)
    entry = get_ledger_entry(session, zone_id, matchday)
    if not matches and entry is None:
        raise FixtureNotFoundError(f"Matchday {matchday} not found for zone {zone_id}")

    playing = {m.home_club_id for m in matches} | {m.away_club_id for m in matches}
    zone_clubs = session.exec(select(ClubZone.club_id).where(ClubZone.zone_id == zone_id)).all()
    by_status = Counter(getattr(m.status, "value", m.status) for m in matches)
    finished = sum(1 for m in matches if m.status in FINISHED_MATCH_STATUSES)

    return {
        "zone_id": zone_id,
        "matchday": matchday,
        "status": entry.status if entry else None,
        "date": entry.date if entry else None,
        "total_matches": len(matches),
        "finished_matches": finished,
        "pending_matches": len(matches) - finished,
        "matches_by_status": dict(by_status),
        "bye_club_ids": sorted(club_id for club_id in set(zone_clubs) if club_id not in playing),
    }


# ============================================================================
# Mutations
# ============================================================================


def apply_finalize(session: Session, zone_id: int, matchday: int) -> Dict[str, Any]:
    """
    Close a matchday from its match statuses. Does not commit.

    - all matches finished -> PLAYED, otherwise INCOMPLETE
    - only when PLAYED: matchday + 1 moves PENDING -> IN_PROGRESS
    - an INCOMPLETE matchday changes nothing else; finalize it again once late
      results are in
    """
    matches = get_matchday_matches(session, zone_id, matchday)
    if not matches:
        raise FixtureNotFoundError(f"Matchday {matchday} has no matches in zone {zone_id}")

    entry = get_ledger_entry(session, zone_id, matchday)
    if entry is None:
        entry = ZoneMatchday(zone_id=zone_id, matchday=matchday)
    previous_status = entry.status

    all_finished = all(m.status in FINISHED_MATCH_STATUSES for m in matches)
    now = datetime.utcnow()
    if all_finished:
        entry.status = MatchdayStatus.PLAYED
        if previous_status != MatchdayStatus.PLAYED or entry.played_at is None:
            entry.played_at = now
    else:
        entry.status = MatchdayStatus.INCOMPLETE
        entry.played_at = None
    entry.updated_at = now
    session.add(entry)

    unlocked: Optional[int] = None
    next_entry = get_ledger_entry(session, zone_id, matchday + 1) if all_finished else None
    if next_entry is not None and next_entry.status == MatchdayStatus.PENDING:
        next_entry.status = MatchdayStatus.IN_PROGRESS
        next_entry.updated_at = now
        session.add(next_entry)
        unlocked = next_entry.matchday

    return {
        "zone_id": zone_id,
        "matchday": matchday,
        "status": entry.status,
        "previous_status": previous_status,
        "unlocked_matchday": unlocked,
        "total_matches": len(matches),
        "finished_matches": sum(1 for m in matches if m.status in FINISHED_MATCH_STATUSES),
    }


def finalize_matchday(
    session: Session,
    zone_id: int,
    matchday: int,
    signal: MatchdayPlayedSignal = matchday_played,
) -> Dict[str, Any]:
    """
    Finalize one matchday in its own transaction, serialized per zone.

    Raises:
        FixtureNotFoundError: zone missing or matchday without matches
    """
    with unit_of_work(session):
        lock_zone(session, zone_id)
        _require_zone(session, zone_id)
        result = apply_finalize(session, zone_id, matchday)

    logger.info(
        "Finalized zone %s matchday %s -> %s (unlocked %s)",
        zone_id,
        matchday,
        result["status"],
        result["unlocked_matchday"],
    )

    if result["status"] == MatchdayStatus.PLAYED and result["previous_status"] != MatchdayStatus.PLAYED:
        signal.send(zone_id, matchday)
    return result


def update_matchday_date(session: Session, zone_id: int, matchday: int, date: Optional[datetime]) -> ZoneMatchday:
    """Set the date of a matchday and of every match played on it."""
    with unit_of_work(session):
        lock_zone(session, zone_id)
        _require_zone(session, zone_id)
        entry = get_ledger_entry(session, zone_id, matchday)
        matches = get_matchday_matches(session, zone_id, matchday)
        if entry is None and not matches:
            raise FixtureNotFoundError(f"Matchday {matchday} not found for zone {zone_id}")
        if entry is None:
            entry = ZoneMatchday(zone_id=zone_id, matchday=matchday, status=MatchdayStatus.PENDING)

        entry.date = date
        entry.updated_at = datetime.utcnow()
        session.add(entry)
        for match in matches:
            match.date = date
            session.add(match)

    session.refresh(entry)
    return entry
