"""
Read-only snapshot of what fixture generation needs from a zone.

Taken once per generation call; everything downstream works on these flat values
instead of ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from fixture_app.models.category import TournamentCategory
from fixture_app.models.club import ClubZone
from fixture_app.models.tournament import Tournament
from fixture_app.models.zone import Zone
from fixture_app.services.fixture_errors import FixtureNotFoundError
from fixture_app.services.round_robin import dedupe_team_ids


@dataclass(frozen=True)
class CategorySnapshot:
    id: int
    name: str
    kickoff_time: Optional[str]
    promotional: bool = False

    @property
    def counts_for_general(self) -> bool:
        return not self.promotional


@dataclass(frozen=True)
class ZoneSnapshot:
    zone_id: int
    zone_name: str
    zone_status: str
    tournament_id: int
    tournament_status: str
    fixture_locked_at: Optional[datetime]
    club_ids: List[int] = field(default_factory=list)
    categories: List[CategorySnapshot] = field(default_factory=list)


def load_enabled_categories(session: Session, tournament_id: int) -> List[CategorySnapshot]:
    categories = session.exec(
        select(TournamentCategory)
        .where(TournamentCategory.tournament_id == tournament_id, TournamentCategory.enabled == True)  # noqa: E712
        .order_by(TournamentCategory.id)
    ).all()
    return [
        CategorySnapshot(id=c.id, name=c.name, kickoff_time=c.kickoff_time, promotional=c.promotional)
        for c in categories
    ]


def load_zone_snapshot(session: Session, zone_id: int) -> ZoneSnapshot:
    """
    Raises:
        FixtureNotFoundError: zone or its tournament does not exist
    """
    zone = session.get(Zone, zone_id)
    if not zone:
        raise FixtureNotFoundError(f"Zone {zone_id} not found")

    tournament = session.get(Tournament, zone.tournament_id)
    if not tournament:
        raise FixtureNotFoundError(f"Tournament {zone.tournament_id} not found")

    club_ids = session.exec(
        select(ClubZone.club_id).where(ClubZone.zone_id == zone_id).order_by(ClubZone.id)
    ).all()

    return ZoneSnapshot(
        zone_id=zone.id,
        zone_name=zone.name,
        zone_status=zone.status,
        tournament_id=tournament.id,
        tournament_status=tournament.status,
        fixture_locked_at=tournament.fixture_locked_at,
        club_ids=dedupe_team_ids(club_ids),
        categories=load_enabled_categories(session, tournament.id),
    )
