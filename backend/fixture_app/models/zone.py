from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import BigInteger, String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_app.models.club import ClubZone
    from fixture_app.models.tournament import Tournament


class ZoneStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


class Zone(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str
    status: ZoneStatus = Field(default=ZoneStatus.OPEN, sa_column=Column(String, nullable=False))
    locked_at: Optional[datetime] = Field(default=None)

    # Fixture provenance: the seed and options that produced the committed schedule
    fixture_seed: Optional[int] = Field(default=None, sa_column=Column(BigInteger, nullable=True))
    fixture_double_round: Optional[bool] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="zones")
    club_zones: List["ClubZone"] = Relationship(back_populates="zone")
