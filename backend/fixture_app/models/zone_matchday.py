from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class MatchdayStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    PLAYED = "PLAYED"
    INCOMPLETE = "INCOMPLETE"


class ZoneMatchday(SQLModel, table=True):
    """Progress record of one matchday of a zone (the matchday ledger)."""

    __tablename__ = "zonematchday"
    __table_args__ = (SAUniqueConstraint("zone_id", "matchday", name="uq_zonematchday_zone_matchday"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    zone_id: int = Field(foreign_key="zone.id", index=True)
    matchday: int
    status: MatchdayStatus = Field(default=MatchdayStatus.PENDING, sa_column=Column(String, nullable=False))
    date: Optional[datetime] = Field(default=None)
    played_at: Optional[datetime] = Field(default=None)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
