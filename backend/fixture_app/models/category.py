from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from fixture_app.models.tournament import Tournament


class TournamentCategory(SQLModel, table=True):
    """Age bracket played inside every match of a tournament."""

    __tablename__ = "tournamentcategory"
    __table_args__ = (SAUniqueConstraint("tournament_id", "name", name="uq_tournament_category_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str
    kickoff_time: Optional[str] = Field(default=None)  # "HH:MM", required before fixture generation
    enabled: bool = Field(default=True)
    promotional: bool = Field(default=False)  # promotional categories never count for general standings

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="categories")
