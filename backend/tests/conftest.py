import os

# Never touch a real database file from the test run
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from fixture_app.database import get_session  # noqa: E402
from fixture_app.main import app  # noqa: E402
from fixture_app.models import (  # noqa: E402
    Club,
    ClubZone,
    Tournament,
    TournamentCategory,
    Zone,
)

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Fresh sqlite:///:memory: engine per test, StaticPool so every session shares it
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Models are registered through fixture_app.models before create_all()
# 4. The client shares the test session, so tests can inspect what routes wrote


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a test database session"""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client whose routes use the test session"""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="tournament")
def tournament_fixture(session: Session) -> Tournament:
    """Tournament with two enabled categories (one promotional) and one disabled category"""
    tournament = Tournament(name="Apertura", year=2026)
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    session.add(TournamentCategory(tournament_id=tournament.id, name="2012", kickoff_time="10:00"))
    session.add(
        TournamentCategory(tournament_id=tournament.id, name="2018", kickoff_time="09:00", promotional=True)
    )
    session.add(TournamentCategory(tournament_id=tournament.id, name="2010", kickoff_time=None, enabled=False))
    session.commit()
    return tournament


@pytest.fixture(name="make_zone")
def make_zone_fixture(session: Session, tournament: Tournament):
    """Factory: zone with `club_count` freshly created clubs assigned, in creation order"""

    def _make_zone(club_count: int = 4, name: str = "Zona A", tournament_id: int = None) -> Zone:
        zone = Zone(tournament_id=tournament_id or tournament.id, name=name)
        session.add(zone)
        session.commit()
        session.refresh(zone)

        for i in range(club_count):
            club = Club(name=f"{name} Club {i + 1}")
            session.add(club)
            session.commit()
            session.refresh(club)
            session.add(ClubZone(zone_id=zone.id, club_id=club.id))
        session.commit()
        session.refresh(zone)
        return zone

    return _make_zone
