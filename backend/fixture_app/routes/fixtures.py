"""
Fixture generation endpoints: preview, commit (zone / tournament) and manual fixtures.
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from sqlmodel import Session

from fixture_app.database import get_session
from fixture_app.services.fixture_errors import FixtureError
from fixture_app.services.fixture_service import (
    FixtureOptions,
    FixtureService,
    ManualFixture,
    ManualMatch,
    ManualMatchday,
)
from fixture_app.services.round_robin import Leg
from fixture_app.services.seeded_random import SEED_MAX, SEED_MIN

router = APIRouter()


class ZoneFixtureOptions(BaseModel):
    double_round: bool = True
    shuffle: bool = True
    seed: Optional[int] = Field(default=None, ge=SEED_MIN, le=SEED_MAX)


class TournamentFixtureOptions(ZoneFixtureOptions):
    zones: Optional[List[int]] = None

    @field_validator("zones")
    @classmethod
    def validate_zones(cls, v):
        if v is not None and len(v) == 0:
            raise ValueError("zones cannot be empty; omit it to generate every zone")
        return v


class GenerateFixtureResponse(BaseModel):
    success: bool
    total_matchdays: int
    seed: Optional[int] = None


class ZoneGenerationResult(BaseModel):
    zone_id: int
    total_matchdays: int
    seed: Optional[int] = None


class GenerateTournamentFixtureResponse(BaseModel):
    success: bool
    rounds_generated: List[int]
    zones: List[ZoneGenerationResult]


class PreviewPairing(BaseModel):
    home_team_id: int
    away_team_id: int


class PreviewMatchday(BaseModel):
    matchday: int
    leg: str
    pairings: List[PreviewPairing]
    bye_team_id: Optional[int] = None


class FixturePreviewResponse(BaseModel):
    zone_id: int
    double_round: bool
    total_matchdays: int
    seed: Optional[int] = None
    matchdays: List[PreviewMatchday]


class ManualFixtureMatch(BaseModel):
    home_club_id: int
    away_club_id: int


class ManualFixtureMatchday(BaseModel):
    matchday: int
    round: Literal["FIRST", "SECOND"] = "FIRST"
    matches: List[ManualFixtureMatch] = Field(min_length=1)
    bye_club_id: Optional[int] = None


class ManualFixtureRequest(BaseModel):
    matchdays: List[ManualFixtureMatchday] = Field(min_length=1)
    double_round: bool = False


def _options(data: ZoneFixtureOptions, zone_ids: Optional[List[int]] = None) -> FixtureOptions:
    return FixtureOptions(double_round=data.double_round, shuffle=data.shuffle, seed=data.seed, zone_ids=zone_ids)


@router.post("/zones/{zone_id}/fixture/preview", response_model=FixturePreviewResponse)
def preview_zone_fixture(zone_id: int, data: ZoneFixtureOptions, session: Session = Depends(get_session)):
    """
    Build the fixture for a zone without saving it.

    Re-running with the returned seed (and shuffle) reproduces the same matchdays.
    """
    try:
        return FixtureService(session).preview_for_zone(zone_id, _options(data))
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/zones/{zone_id}/fixture", response_model=GenerateFixtureResponse, status_code=201)
def generate_zone_fixture(zone_id: int, data: ZoneFixtureOptions, session: Session = Depends(get_session)):
    """Generate and persist the fixture for one zone. 409 if the zone already has matches."""
    try:
        return FixtureService(session).generate_for_zone(zone_id, _options(data))
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/zones/{zone_id}/fixture/manual", response_model=GenerateFixtureResponse, status_code=201)
def create_manual_zone_fixture(zone_id: int, data: ManualFixtureRequest, session: Session = Depends(get_session)):
    """Persist explicitly supplied matchdays for a zone"""
    fixture = ManualFixture(
        matchdays=[
            ManualMatchday(
                matchday=md.matchday,
                leg=Leg(md.round),
                matches=[ManualMatch(m.home_club_id, m.away_club_id) for m in md.matches],
                bye_club_id=md.bye_club_id,
            )
            for md in data.matchdays
        ],
        double_round=data.double_round,
    )
    try:
        return FixtureService(session).create_manual_fixture(zone_id, fixture)
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post(
    "/tournaments/{tournament_id}/fixtures/generate",
    response_model=GenerateTournamentFixtureResponse,
    status_code=201,
)
def generate_tournament_fixture(
    tournament_id: int, data: TournamentFixtureOptions, session: Session = Depends(get_session)
):
    """Generate every (or the selected) zone of a tournament in one transaction, then lock the tournament fixture."""
    try:
        return FixtureService(session).generate_for_tournament(tournament_id, _options(data, data.zones))
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
