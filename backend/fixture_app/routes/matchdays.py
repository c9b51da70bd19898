"""
Matchday ledger endpoints: list, summary, date and finalize.
"""

from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from fixture_app.database import get_session
from fixture_app.services import matchday_ledger
from fixture_app.services.fixture_errors import FixtureError

router = APIRouter()


class ZoneMatchdayResponse(BaseModel):
    id: int
    zone_id: int
    matchday: int
    status: str
    date: Optional[datetime] = None
    played_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MatchdaySummaryResponse(BaseModel):
    zone_id: int
    matchday: int
    status: Optional[str] = None
    date: Optional[datetime] = None
    total_matches: int
    finished_matches: int
    pending_matches: int
    matches_by_status: Dict[str, int]
    bye_club_ids: List[int]


class FinalizeMatchdayResponse(BaseModel):
    zone_id: int
    matchday: int
    status: str
    previous_status: Optional[str] = None
    unlocked_matchday: Optional[int] = None
    total_matches: int
    finished_matches: int


class MatchdayUpdate(BaseModel):
    date: Optional[datetime] = None


@router.get("/zones/{zone_id}/matchdays", response_model=List[ZoneMatchdayResponse])
def get_zone_matchdays(zone_id: int, session: Session = Depends(get_session)):
    """Ledger rows of a zone ordered by matchday"""
    try:
        return matchday_ledger.list_matchdays(session, zone_id)
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/zones/{zone_id}/matchdays/{matchday}/finalize", response_model=FinalizeMatchdayResponse)
def finalize_matchday(zone_id: int, matchday: int, session: Session = Depends(get_session)):
    """
    Close a matchday: PLAYED when every match is finished, INCOMPLETE otherwise.
    The next matchday is opened if it is still PENDING.
    """
    try:
        return matchday_ledger.finalize_matchday(session, zone_id, matchday)
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/zones/{zone_id}/matchdays/{matchday}/summary", response_model=MatchdaySummaryResponse)
def get_matchday_summary(zone_id: int, matchday: int, session: Session = Depends(get_session)):
    try:
        return matchday_ledger.get_matchday_summary(session, zone_id, matchday)
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/zones/{zone_id}/matchdays/{matchday}", response_model=ZoneMatchdayResponse)
def update_matchday(zone_id: int, matchday: int, data: MatchdayUpdate, session: Session = Depends(get_session)):
    """Set (or clear) the date of a matchday and all of its matches"""
    try:
        return matchday_ledger.update_matchday_date(session, zone_id, matchday, data.date)
    except FixtureError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
