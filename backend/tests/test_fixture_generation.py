"""
Tests for fixture generation through FixtureService.

Proves:
- matches, category rows and the matchday ledger are written together
- the gate rejects (in order) existing fixtures, small zones, unready categories, locked zones
- a second generation is rejected and leaves the first fixture untouched
- preview writes nothing and matches the committed fixture for the same seed
- a failure while materializing rolls everything back
- tournament-wide generation validates every zone before writing
"""

from datetime import datetime

import pytest
from sqlmodel import Session, func, select

from fixture_app.models import (
    ClubZone,
    Match,
    MatchCategory,
    MatchdayStatus,
    Tournament,
    TournamentCategory,
    Zone,
    ZoneMatchday,
    ZoneStatus,
)
from fixture_app.services import fixture_service as fixture_service_module
from fixture_app.services.fixture_errors import (
    FixtureAlreadyExistsError,
    FixtureGenerationError,
    FixtureNotFoundError,
    FixtureValidationError,
)
from fixture_app.services.fixture_service import FixtureOptions, FixtureService


def _count(session: Session, model, *where) -> int:
    return session.exec(select(func.count(model.id)).where(*where)).one()


def _zone_club_ids(session: Session, zone: Zone):
    return list(session.exec(select(ClubZone.club_id).where(ClubZone.zone_id == zone.id).order_by(ClubZone.id)).all())


# ============================================================================
# Zone generation
# ============================================================================


def test_generate_for_zone_writes_matches_categories_and_ledger(session: Session, make_zone):
    zone = make_zone(4)
    clubs = _zone_club_ids(session, zone)

    result = FixtureService(session).generate_for_zone(zone.id, FixtureOptions(double_round=True, shuffle=False))

    assert result == {"success": True, "total_matchdays": 6, "seed": None}
    matches = session.exec(select(Match).where(Match.zone_id == zone.id).order_by(Match.matchday, Match.id)).all()
    assert len(matches) == 12
    assert [(m.home_club_id, m.away_club_id) for m in matches if m.matchday == 1] == [
        (clubs[0], clubs[3]),
        (clubs[1], clubs[2]),
    ]
    assert {m.leg for m in matches if m.matchday <= 3} == {"FIRST"}
    assert {m.leg for m in matches if m.matchday > 3} == {"SECOND"}
    assert {m.status for m in matches} == {"SCHEDULED"}

    # Two enabled categories per match; the disabled one is skipped
    rows = session.exec(select(MatchCategory).where(MatchCategory.match_id == matches[0].id)).all()
    assert len(rows) == 2
    by_kickoff = {r.kickoff_time: r.counts_for_general for r in rows}
    assert by_kickoff == {"10:00": True, "09:00": False}
    assert _count(session, MatchCategory) == 24

    ledger = session.exec(
        select(ZoneMatchday).where(ZoneMatchday.zone_id == zone.id).order_by(ZoneMatchday.matchday)
    ).all()
    assert [row.matchday for row in ledger] == [1, 2, 3, 4, 5, 6]
    assert ledger[0].status == MatchdayStatus.IN_PROGRESS
    assert all(row.status == MatchdayStatus.PENDING for row in ledger[1:])

    session.refresh(zone)
    assert zone.status == ZoneStatus.IN_PROGRESS
    assert zone.locked_at is not None
    assert zone.fixture_double_round is True
    assert zone.fixture_seed is None


def test_generate_single_round_odd_zone(session: Session, make_zone):
    zone = make_zone(5)

    result = FixtureService(session).generate_for_zone(zone.id, FixtureOptions(double_round=False, shuffle=False))

    assert result["total_matchdays"] == 5
    assert _count(session, Match, Match.zone_id == zone.id) == 10
    assert _count(session, ZoneMatchday, ZoneMatchday.zone_id == zone.id) == 5


def test_generated_seed_is_returned_and_stored(session: Session, make_zone):
    zone = make_zone(6)

    result = FixtureService(session).generate_for_zone(zone.id, FixtureOptions(shuffle=True))

    assert result["seed"] is not None
    session.refresh(zone)
    assert zone.fixture_seed == result["seed"]


def test_second_generation_is_rejected_and_first_fixture_untouched(session: Session, make_zone):
    zone = make_zone(4)
    service = FixtureService(session)
    service.generate_for_zone(zone.id, FixtureOptions(shuffle=True, seed=31))
    before = [
        (m.id, m.matchday, m.home_club_id, m.away_club_id)
        for m in session.exec(select(Match).where(Match.zone_id == zone.id).order_by(Match.id)).all()
    ]

    with pytest.raises(FixtureAlreadyExistsError):
        service.generate_for_zone(zone.id, FixtureOptions(shuffle=True, seed=32))

    after = [
        (m.id, m.matchday, m.home_club_id, m.away_club_id)
        for m in session.exec(select(Match).where(Match.zone_id == zone.id).order_by(Match.id)).all()
    ]
    assert after == before
    session.refresh(zone)
    assert zone.fixture_seed == 31


# ============================================================================
# Gate
# ============================================================================


def test_zone_needs_two_clubs(session: Session, make_zone):
    zone = make_zone(1, name="Zona Norte")

    with pytest.raises(FixtureValidationError, match="Zona Norte"):
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions())

    assert _count(session, Match) == 0


def test_categories_need_kickoff_time(session: Session, tournament: Tournament, make_zone):
    zone = make_zone(4)
    session.add(TournamentCategory(tournament_id=tournament.id, name="2015", kickoff_time="  "))
    session.commit()

    with pytest.raises(FixtureValidationError, match="2015"):
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions())

    assert _count(session, Match) == 0
    assert _count(session, ZoneMatchday) == 0


def test_tournament_needs_enabled_categories(session: Session, make_zone):
    other = Tournament(name="Clausura", year=2026)
    session.add(other)
    session.commit()
    session.refresh(other)
    zone = make_zone(4, tournament_id=other.id)

    with pytest.raises(FixtureValidationError, match="categories"):
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions())


def test_locked_zone_is_rejected(session: Session, make_zone):
    zone = make_zone(4)
    zone.status = ZoneStatus.IN_PROGRESS
    session.add(zone)
    session.commit()

    with pytest.raises(FixtureValidationError, match="locked"):
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions())


def test_locked_tournament_fixture_is_rejected(session: Session, tournament: Tournament, make_zone):
    zone = make_zone(4)
    tournament.fixture_locked_at = datetime.utcnow()
    session.add(tournament)
    session.commit()

    with pytest.raises(FixtureValidationError, match="locked"):
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions())


def test_existing_matches_reported_before_validation(session: Session, make_zone):
    zone = make_zone(4)
    FixtureService(session).generate_for_zone(zone.id, FixtureOptions())

    # The zone is now locked too, but "already exists" wins
    with pytest.raises(FixtureAlreadyExistsError):
        FixtureService(session).preview_for_zone(zone.id, FixtureOptions())


def test_seed_outside_int64_is_a_validation_error(session: Session, make_zone):
    zone = make_zone(4)

    with pytest.raises(FixtureValidationError, match="64-bit"):
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions(seed=-(2**63) - 1))

    assert _count(session, Match) == 0


def test_unknown_zone(session: Session, tournament: Tournament):
    with pytest.raises(FixtureNotFoundError):
        FixtureService(session).generate_for_zone(9999, FixtureOptions())
    with pytest.raises(FixtureNotFoundError):
        FixtureService(session).preview_for_zone(9999, FixtureOptions())


# ============================================================================
# Preview
# ============================================================================


def test_preview_writes_nothing(session: Session, make_zone):
    zone = make_zone(5)

    preview = FixtureService(session).preview_for_zone(zone.id, FixtureOptions(shuffle=True))

    assert preview["zone_id"] == zone.id
    assert preview["seed"] is not None
    assert preview["total_matchdays"] == 10
    assert all("bye_team_id" in md for md in preview["matchdays"])
    assert _count(session, Match) == 0
    assert _count(session, ZoneMatchday) == 0
    session.refresh(zone)
    assert zone.status == ZoneStatus.OPEN


def test_preview_then_commit_with_same_seed(session: Session, make_zone):
    zone = make_zone(6)
    service = FixtureService(session)

    preview = service.preview_for_zone(zone.id, FixtureOptions(shuffle=True))
    repeated = service.preview_for_zone(zone.id, FixtureOptions(shuffle=True, seed=preview["seed"]))
    assert repeated == preview

    service.generate_for_zone(zone.id, FixtureOptions(shuffle=True, seed=preview["seed"]))
    committed = {
        (m.matchday, m.home_club_id, m.away_club_id)
        for m in session.exec(select(Match).where(Match.zone_id == zone.id)).all()
    }
    previewed = {
        (md["matchday"], p["home_team_id"], p["away_team_id"]) for md in preview["matchdays"] for p in md["pairings"]
    }
    assert committed == previewed


# ============================================================================
# Atomicity
# ============================================================================


def test_materialize_failure_rolls_back_everything(session: Session, make_zone, monkeypatch):
    zone = make_zone(4)
    real_materialize = fixture_service_module.materialize_schedule

    def failing_materialize(*args, **kwargs):
        real_materialize(*args, **kwargs)
        raise RuntimeError("disk full")

    monkeypatch.setattr(fixture_service_module, "materialize_schedule", failing_materialize)

    with pytest.raises(FixtureGenerationError) as exc_info:
        FixtureService(session).generate_for_zone(zone.id, FixtureOptions())

    assert "disk full" not in str(exc_info.value)
    assert _count(session, Match) == 0
    assert _count(session, MatchCategory) == 0
    assert _count(session, ZoneMatchday) == 0
    session.refresh(zone)
    assert zone.status == ZoneStatus.OPEN


# ============================================================================
# Tournament-wide
# ============================================================================


def test_generate_for_tournament(session: Session, tournament: Tournament, make_zone):
    zone_a = make_zone(4, name="Zona A")
    zone_b = make_zone(5, name="Zona B")

    result = FixtureService(session).generate_for_tournament(tournament.id, FixtureOptions(shuffle=False))

    assert result["success"] is True
    assert result["rounds_generated"] == [6, 10]
    assert [z["zone_id"] for z in result["zones"]] == [zone_a.id, zone_b.id]
    assert _count(session, Match, Match.zone_id == zone_a.id) == 12
    assert _count(session, Match, Match.zone_id == zone_b.id) == 20
    session.refresh(tournament)
    assert tournament.fixture_locked_at is not None


def test_tournament_generation_validates_all_zones_first(session: Session, tournament: Tournament, make_zone):
    make_zone(4, name="Zona A")
    make_zone(1, name="Zona B")

    with pytest.raises(FixtureValidationError, match="Zona B"):
        FixtureService(session).generate_for_tournament(tournament.id, FixtureOptions())

    assert _count(session, Match) == 0
    session.refresh(tournament)
    assert tournament.fixture_locked_at is None


def test_tournament_generation_rejects_already_generated_zone(session: Session, tournament: Tournament, make_zone):
    zone_a = make_zone(4, name="Zona A")
    make_zone(4, name="Zona B")
    FixtureService(session).generate_for_zone(zone_a.id, FixtureOptions())

    with pytest.raises(FixtureAlreadyExistsError):
        FixtureService(session).generate_for_tournament(tournament.id, FixtureOptions())

    assert _count(session, Match) == 12


def test_tournament_generation_zone_selection(session: Session, tournament: Tournament, make_zone):
    make_zone(4, name="Zona A")
    zone_b = make_zone(3, name="Zona B")

    result = FixtureService(session).generate_for_tournament(
        tournament.id, FixtureOptions(double_round=False, zone_ids=[zone_b.id])
    )

    assert result["rounds_generated"] == [3]
    assert _count(session, Match) == 3


def test_tournament_generation_unknown_zone_or_tournament(session: Session, tournament: Tournament, make_zone):
    make_zone(4)
    with pytest.raises(FixtureNotFoundError):
        FixtureService(session).generate_for_tournament(tournament.id, FixtureOptions(zone_ids=[4242]))
    with pytest.raises(FixtureNotFoundError):
        FixtureService(session).generate_for_tournament(4242, FixtureOptions())


def test_tournament_without_zones(session: Session, tournament: Tournament):
    with pytest.raises(FixtureValidationError, match="no zones"):
        FixtureService(session).generate_for_tournament(tournament.id, FixtureOptions())
