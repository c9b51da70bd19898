import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator

from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, select

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fixtures.db")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=_echo,
    connect_args=_connect_args,
)

# First key of the two-int advisory lock; second key is the zone id.
ZONE_LOCK_NAMESPACE = 7301


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from fixture_app.models.category import TournamentCategory  # noqa: F401
    from fixture_app.models.club import Club, ClubZone  # noqa: F401
    from fixture_app.models.match import Match, MatchCategory  # noqa: F401
    from fixture_app.models.tournament import Tournament  # noqa: F401
    from fixture_app.models.zone import Zone  # noqa: F401
    from fixture_app.models.zone_matchday import ZoneMatchday  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """
    Single transaction boundary.

    Everything executed inside the block is committed together when the block
    exits normally and rolled back as a whole when it raises.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def lock_zone(session: Session, zone_id: int) -> None:
    """
    Serialize writers of one zone for the rest of the current transaction.

    Call it before the first read that the caller acts on.

    PostgreSQL: transaction-scoped advisory lock keyed by zone id.
    SQLite: no-op write on the zone row. pysqlite only opens a transaction on the
    first write, so this is what takes the database write lock; a second writer
    blocks here until the first commits and then reads its committed rows.
    Other dialects: row lock on the zone.
    """
    from fixture_app.models.zone import Zone

    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        session.connection().execute(text("UPDATE zone SET id = id WHERE id = :zone_id"), {"zone_id": zone_id})
        return

    if dialect == "postgresql":
        session.connection().execute(
            text("SELECT pg_advisory_xact_lock(:namespace, :zone_id)"),
            {"namespace": ZONE_LOCK_NAMESPACE, "zone_id": zone_id},
        )
        return

    session.exec(select(Zone).where(Zone.id == zone_id).with_for_update()).first()
