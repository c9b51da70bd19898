from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_app.models.category import TournamentCategory


class MatchLeg(str, Enum):
    FIRST = "FIRST"
    SECOND = "SECOND"


class MatchStatus(str, Enum):
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"


# Statuses a match cannot leave; a matchday is complete when all its matches are in one of them
FINISHED_MATCH_STATUSES = (MatchStatus.FINISHED, MatchStatus.CANCELLED)


class Match(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("zone_id", "matchday", "home_club_id", "away_club_id", name="uq_match_zone_matchday_pair"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    zone_id: int = Field(foreign_key="zone.id", index=True)
    matchday: int
    leg: MatchLeg = Field(sa_column=Column(String, nullable=False))
    home_club_id: int = Field(foreign_key="club.id")
    away_club_id: int = Field(foreign_key="club.id")
    status: MatchStatus = Field(default=MatchStatus.SCHEDULED, sa_column=Column(String, nullable=False))
    date: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    categories: List["MatchCategory"] = Relationship(back_populates="match")


class MatchCategory(SQLModel, table=True):
    """Per-category scoresheet of a match; every category shares the match's clubs and matchday."""

    __tablename__ = "matchcategory"
    __table_args__ = (
        SAUniqueConstraint("match_id", "tournament_category_id", name="uq_matchcategory_match_category"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    tournament_category_id: int = Field(foreign_key="tournamentcategory.id")
    kickoff_time: str
    counts_for_general: bool = Field(default=True)
    home_score: Optional[int] = Field(default=None)
    away_score: Optional[int] = Field(default=None)
    closed_at: Optional[datetime] = Field(default=None)

    # Relationships
    match: "Match" = Relationship(back_populates="categories")
    tournament_category: "TournamentCategory" = Relationship()
