from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_app.models.zone import Zone


class Club(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    zone_assignments: List["ClubZone"] = Relationship(back_populates="club")


class ClubZone(SQLModel, table=True):
    __tablename__ = "clubzone"
    __table_args__ = (SAUniqueConstraint("zone_id", "club_id", name="uq_clubzone_zone_club"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    zone_id: int = Field(foreign_key="zone.id", index=True)
    club_id: int = Field(foreign_key="club.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    zone: "Zone" = Relationship(back_populates="club_zones")
    club: "Club" = Relationship(back_populates="zone_assignments")
