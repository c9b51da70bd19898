"""
Fixture Service

Orchestrates fixture generation as one explicit unit of work:

    begin -> lock zone(s) -> snapshot -> gate -> build -> materialize -> commit

Preview runs the same snapshot/gate/build steps and stops before writing, so a
preview and a later commit with the returned seed produce the same matchdays.

Error policy:
- FixtureAlreadyExistsError / FixtureValidationError / FixtureNotFoundError
  propagate unchanged (caller can fix them)
- anything else is logged and replaced by FixtureGenerationError after rollback
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from sqlmodel import Session, select

from fixture_app.database import lock_zone, unit_of_work
from fixture_app.models.tournament import Tournament
from fixture_app.models.zone import Zone, ZoneStatus
from fixture_app.services.fixture_errors import (
    FixtureError,
    FixtureGenerationError,
    FixtureNotFoundError,
    FixtureValidationError,
)
from fixture_app.services.fixture_gate import check_generation
from fixture_app.services.fixture_materializer import materialize_schedule
from fixture_app.services.round_robin import (
    Bye,
    Leg,
    Pairing,
    RoundRobinSchedule,
    build_round_robin,
    find_schedule_violations,
    mirror_byes,
    mirror_pairings,
    schedule_to_preview,
)
from fixture_app.services.seeded_random import SEED_MAX, SEED_MIN
from fixture_app.services.zone_snapshot import ZoneSnapshot, load_zone_snapshot

logger = logging.getLogger(__name__)


@dataclass
class FixtureOptions:
    double_round: bool = True
    shuffle: bool = True
    seed: Optional[int] = None
    zone_ids: Optional[List[int]] = None  # tournament-wide generation only; None = every zone


@dataclass
class ManualMatch:
    home_club_id: int
    away_club_id: int


@dataclass
class ManualMatchday:
    matchday: int
    leg: Leg
    matches: List[ManualMatch]
    bye_club_id: Optional[int] = None


@dataclass
class ManualFixture:
    matchdays: List[ManualMatchday] = field(default_factory=list)
    double_round: bool = False


class FixtureService:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def preview_for_zone(self, zone_id: int, options: FixtureOptions) -> Dict[str, Any]:
        """Validate and build without persisting anything."""
        snapshot = load_zone_snapshot(self.session, zone_id)
        check_generation(self.session, [snapshot])
        schedule = self._build(snapshot, options)
        return schedule_to_preview(zone_id, schedule)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def generate_for_zone(self, zone_id: int, options: FixtureOptions) -> Dict[str, Any]:
        with self._generation(f"zone {zone_id}"):
            lock_zone(self.session, zone_id)
            snapshot = load_zone_snapshot(self.session, zone_id)
            check_generation(self.session, [snapshot])

            schedule = self._build(snapshot, options)
            materialize_schedule(self.session, snapshot.zone_id, snapshot.tournament_id, schedule, snapshot.categories)
            self._mark_zone_generated(zone_id, schedule)

        logger.info(
            "Generated fixture for zone %s: %s matchdays, %s matches, seed=%s",
            zone_id,
            schedule.total_matchdays,
            len(schedule.pairings),
            schedule.seed,
        )
        return {"success": True, "total_matchdays": schedule.total_matchdays, "seed": schedule.seed}

    def generate_for_tournament(self, tournament_id: int, options: FixtureOptions) -> Dict[str, Any]:
        """
        Generate every selected zone of a tournament in one transaction.

        All zones pass the gate before the first match is written. Each zone gets
        its own seed when shuffling without an explicit one.
        """
        zone_results: List[Dict[str, Any]] = []

        with self._generation(f"tournament {tournament_id}"):
            tournament = self.session.get(Tournament, tournament_id)
            if not tournament:
                raise FixtureNotFoundError(f"Tournament {tournament_id} not found")

            zone_ids = self._select_zone_ids(tournament_id, options.zone_ids)
            for zone_id in zone_ids:
                lock_zone(self.session, zone_id)

            snapshots = [load_zone_snapshot(self.session, zone_id) for zone_id in zone_ids]
            check_generation(self.session, snapshots)

            for snapshot in snapshots:
                schedule = self._build(snapshot, options)
                materialize_schedule(
                    self.session, snapshot.zone_id, snapshot.tournament_id, schedule, snapshot.categories
                )
                self._mark_zone_generated(snapshot.zone_id, schedule)
                zone_results.append(
                    {
                        "zone_id": snapshot.zone_id,
                        "total_matchdays": schedule.total_matchdays,
                        "seed": schedule.seed,
                    }
                )

            tournament.fixture_locked_at = datetime.utcnow()
            self.session.add(tournament)

        logger.info("Generated fixture for tournament %s across %s zones", tournament_id, len(zone_results))
        return {
            "success": True,
            "rounds_generated": [z["total_matchdays"] for z in zone_results],
            "zones": zone_results,
        }

    def create_manual_fixture(self, zone_id: int, fixture: ManualFixture) -> Dict[str, Any]:
        """Persist caller-supplied matchdays after the same gate and structural checks."""
        with self._generation(f"zone {zone_id} (manual)"):
            lock_zone(self.session, zone_id)
            snapshot = load_zone_snapshot(self.session, zone_id)
            check_generation(self.session, [snapshot])

            schedule = build_manual_schedule(snapshot, fixture)
            materialize_schedule(self.session, snapshot.zone_id, snapshot.tournament_id, schedule, snapshot.categories)
            self._mark_zone_generated(zone_id, schedule)

        logger.info("Stored manual fixture for zone %s: %s matchdays", zone_id, schedule.total_matchdays)
        return {"success": True, "total_matchdays": schedule.total_matchdays, "seed": None}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _generation(self, target: str) -> Iterator[None]:
        try:
            with unit_of_work(self.session):
                yield
        except FixtureError:
            raise
        except Exception as exc:
            logger.exception("Fixture generation failed for %s", target)
            raise FixtureGenerationError() from exc

    @staticmethod
    def _build(snapshot: ZoneSnapshot, options: FixtureOptions) -> RoundRobinSchedule:
        if options.seed is not None and not SEED_MIN <= options.seed <= SEED_MAX:
            raise FixtureValidationError(f"Seed {options.seed} is outside the 64-bit integer range")
        return build_round_robin(
            snapshot.club_ids,
            double_round=options.double_round,
            shuffle=options.shuffle,
            seed=options.seed,
        )

    def _select_zone_ids(self, tournament_id: int, requested: Optional[List[int]]) -> List[int]:
        zone_ids = list(
            self.session.exec(select(Zone.id).where(Zone.tournament_id == tournament_id).order_by(Zone.id)).all()
        )
        if not zone_ids:
            raise FixtureValidationError(f"Tournament {tournament_id} has no zones")
        if requested is None:
            return zone_ids

        unknown = [z for z in requested if z not in zone_ids]
        if unknown:
            raise FixtureNotFoundError(
                f"Zones {', '.join(str(z) for z in unknown)} do not belong to tournament {tournament_id}"
            )
        # Sorted so concurrent tournament-wide requests take zone locks in the same order
        return sorted(set(requested))

    def _mark_zone_generated(self, zone_id: int, schedule: RoundRobinSchedule) -> None:
        zone = self.session.get(Zone, zone_id)
        zone.status = ZoneStatus.IN_PROGRESS
        zone.locked_at = datetime.utcnow()
        zone.fixture_seed = schedule.seed
        zone.fixture_double_round = schedule.double_round
        self.session.add(zone)


def build_manual_schedule(snapshot: ZoneSnapshot, fixture: ManualFixture) -> RoundRobinSchedule:
    """
    Convert a manual fixture into a RoundRobinSchedule, rejecting anything a
    generated schedule could never contain.

    Raises:
        FixtureValidationError: unknown clubs, repeated matchdays, clashes
    """
    if not fixture.matchdays:
        raise FixtureValidationError("A manual fixture needs at least one matchday")

    zone_clubs = set(snapshot.club_ids)
    errors: List[str] = []
    seen_matchdays = set()
    first_leg: List[Pairing] = []
    second_leg: List[Pairing] = []
    byes_first: List[Bye] = []
    byes_second: List[Bye] = []

    for entry in sorted(fixture.matchdays, key=lambda m: m.matchday):
        if entry.matchday < 1:
            errors.append(f"Matchday numbers start at 1 (got {entry.matchday})")
            continue
        if entry.matchday in seen_matchdays:
            errors.append(f"Matchday {entry.matchday} is defined more than once")
            continue
        seen_matchdays.add(entry.matchday)

        pairings = first_leg if entry.leg == Leg.FIRST else second_leg
        byes = byes_first if entry.leg == Leg.FIRST else byes_second
        for m in entry.matches:
            for club_id in (m.home_club_id, m.away_club_id):
                if club_id not in zone_clubs:
                    errors.append(
                        f"Matchday {entry.matchday}: club {club_id} is not assigned to zone {snapshot.zone_name}"
                    )
            pairings.append(Pairing(entry.matchday, entry.leg, m.home_club_id, m.away_club_id))
        if entry.bye_club_id is not None:
            if entry.bye_club_id not in zone_clubs:
                errors.append(
                    f"Matchday {entry.matchday}: bye club {entry.bye_club_id} "
                    f"is not assigned to zone {snapshot.zone_name}"
                )
            byes.append(Bye(entry.matchday, entry.leg, entry.bye_club_id))

    total_rounds = max((p.matchday for p in first_leg), default=0)
    total_rounds = max([total_rounds] + [b.matchday for b in byes_first])

    if fixture.double_round:
        if second_leg or byes_second:
            errors.append("Second leg matchdays cannot be supplied when double_round mirrors the first leg")
        else:
            second_leg = mirror_pairings(first_leg, total_rounds)
            byes_second = mirror_byes(byes_first, total_rounds)
    elif second_leg and min(p.matchday for p in second_leg) <= total_rounds:
        errors.append("Second leg matchdays must come after every first leg matchday")

    schedule = RoundRobinSchedule(
        first_leg=first_leg,
        second_leg=second_leg,
        byes_first_leg=byes_first,
        byes_second_leg=byes_second,
        total_rounds=total_rounds,
        seed=None,
        double_round=fixture.double_round,
        team_ids=list(snapshot.club_ids),
    )
    errors.extend(find_schedule_violations(schedule))

    if errors:
        raise FixtureValidationError("; ".join(errors))
    return schedule
