"""
Match endpoints used around the fixture: listing a zone's calendar and moving a
match between statuses (result recording lives elsewhere and calls this).
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from fixture_app.database import get_session, lock_zone, unit_of_work
from fixture_app.models.match import FINISHED_MATCH_STATUSES, Match, MatchCategory, MatchStatus
from fixture_app.models.zone import Zone
from fixture_app.models.zone_matchday import MatchdayStatus
from fixture_app.services.matchday_ledger import get_ledger_entry

router = APIRouter()


class MatchCategoryResponse(BaseModel):
    id: int
    tournament_category_id: int
    kickoff_time: str
    counts_for_general: bool
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    class Config:
        from_attributes = True


class MatchResponse(BaseModel):
    id: int
    tournament_id: int
    zone_id: int
    matchday: int
    leg: str
    home_club_id: int
    away_club_id: int
    status: str
    date: Optional[datetime] = None
    categories: List[MatchCategoryResponse] = []


class MatchUpdate(BaseModel):
    status: Optional[MatchStatus] = None
    date: Optional[datetime] = None


def _match_to_response(session: Session, m: Match) -> MatchResponse:
    categories = session.exec(
        select(MatchCategory).where(MatchCategory.match_id == m.id).order_by(MatchCategory.id)
    ).all()
    return MatchResponse(
        id=m.id,
        tournament_id=m.tournament_id,
        zone_id=m.zone_id,
        matchday=m.matchday,
        leg=m.leg,
        home_club_id=m.home_club_id,
        away_club_id=m.away_club_id,
        status=m.status,
        date=m.date,
        categories=[MatchCategoryResponse.model_validate(c) for c in categories],
    )


@router.get("/zones/{zone_id}/matches", response_model=List[MatchResponse])
def get_zone_matches(zone_id: int, session: Session = Depends(get_session)):
    """All matches of a zone ordered by matchday"""
    zone = session.get(Zone, zone_id)
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")

    matches = session.exec(
        select(Match).where(Match.zone_id == zone_id).order_by(Match.matchday, Match.id)
    ).all()
    return [_match_to_response(session, m) for m in matches]


@router.patch("/matches/{match_id}", response_model=MatchResponse)
def update_match(match_id: int, data: MatchUpdate, session: Session = Depends(get_session)):
    """
    Update a match's status and/or date.

    A match of a PLAYED matchday cannot go back to an unfinished status: finalize
    the matchday again after correcting results instead.
    """
    with unit_of_work(session):
        match = session.get(Match, match_id)
        if not match:
            raise HTTPException(status_code=404, detail="Match not found")

        # Serialize with finalize_matchday on the same zone, then re-read under the lock
        lock_zone(session, match.zone_id)
        session.refresh(match)

        if data.status is not None:
            if match.status == MatchStatus.CANCELLED and data.status != MatchStatus.CANCELLED:
                raise HTTPException(status_code=422, detail="CANCELLED is terminal; cannot change status")
            entry = get_ledger_entry(session, match.zone_id, match.matchday)
            if (
                entry is not None
                and entry.status == MatchdayStatus.PLAYED
                and data.status not in FINISHED_MATCH_STATUSES
            ):
                raise HTTPException(
                    status_code=409,
                    detail=(
                        f"Matchday {match.matchday} is already PLAYED; "
                        f"a match on it cannot become {data.status.value}"
                    ),
                )
            match.status = data.status

        if data.date is not None:
            match.date = data.date

        session.add(match)

    session.refresh(match)
    return _match_to_response(session, match)
