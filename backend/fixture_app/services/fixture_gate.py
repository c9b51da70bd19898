"""
Generation gate: preconditions checked before any fixture is built.

Order matters and is part of the contract:
1. no existing matches       -> FixtureAlreadyExistsError
2. at least two clubs        -> FixtureValidationError (names the zone)
3. categories ready          -> FixtureValidationError (names the category)
4. zone open, tournament not locked -> FixtureValidationError
"""

import logging
from typing import Iterable, List

from sqlmodel import Session, func, select

from fixture_app.models.match import Match
from fixture_app.models.tournament import TournamentStatus
from fixture_app.models.zone import ZoneStatus
from fixture_app.services.fixture_errors import FixtureAlreadyExistsError, FixtureValidationError
from fixture_app.services.zone_snapshot import CategorySnapshot, ZoneSnapshot

logger = logging.getLogger(__name__)

MIN_CLUBS_PER_ZONE = 2


def count_zone_matches(session: Session, zone_id: int) -> int:
    return session.exec(select(func.count(Match.id)).where(Match.zone_id == zone_id)).one()


def require_no_existing_fixture(session: Session, zone_ids: Iterable[int]) -> None:
    existing = [zone_id for zone_id in zone_ids if count_zone_matches(session, zone_id) > 0]
    if existing:
        logger.warning("Fixture generation rejected: matches already exist for zones %s", existing)
        if len(existing) == 1:
            raise FixtureAlreadyExistsError(f"Zone {existing[0]} already has a generated fixture.")
        raise FixtureAlreadyExistsError(
            f"Zones {', '.join(str(z) for z in existing)} already have a generated fixture."
        )


def require_min_clubs(snapshot: ZoneSnapshot) -> None:
    if len(snapshot.club_ids) < MIN_CLUBS_PER_ZONE:
        raise FixtureValidationError(
            f"Zone {snapshot.zone_name} must have at least {MIN_CLUBS_PER_ZONE} clubs "
            f"(has {len(snapshot.club_ids)})"
        )


def require_categories_ready(categories: List[CategorySnapshot]) -> None:
    if not categories:
        raise FixtureValidationError("The tournament must have enabled categories before generating the fixture")

    missing = [c.name for c in categories if not (c.kickoff_time or "").strip()]
    if missing:
        raise FixtureValidationError(f"Categories without kickoff time: {', '.join(missing)}")


def require_zone_open(snapshot: ZoneSnapshot) -> None:
    if snapshot.zone_status != ZoneStatus.OPEN:
        raise FixtureValidationError(
            f"Zone {snapshot.zone_name} is locked for scheduling (status {snapshot.zone_status})"
        )
    if snapshot.fixture_locked_at is not None:
        raise FixtureValidationError("The tournament fixture is locked; no further generation is allowed")
    if snapshot.tournament_status == TournamentStatus.FINISHED:
        raise FixtureValidationError("The tournament is finished")


def check_generation(session: Session, snapshots: List[ZoneSnapshot]) -> None:
    """
    Run every precondition for all zones before anything is written.

    All zones are checked for existing matches first, so an already-generated
    zone is reported as such even if another zone also fails validation.
    """
    require_no_existing_fixture(session, [s.zone_id for s in snapshots])

    for snapshot in snapshots:
        require_min_clubs(snapshot)

    if snapshots:
        require_categories_ready(snapshots[0].categories)

    for snapshot in snapshots:
        require_zone_open(snapshot)
