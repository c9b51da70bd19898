"""
Services Layer

Business logic behind the fixture endpoints:
- round_robin / seeded_random are pure and never touch the database
- the rest accept a Session plus domain inputs and return domain outputs
- no service depends on HTTP request/response objects
"""

# Register every table with SQLModel metadata before any service builds a query
from fixture_app.models.category import TournamentCategory  # noqa: F401
from fixture_app.models.club import Club, ClubZone  # noqa: F401
from fixture_app.models.match import Match, MatchCategory  # noqa: F401
from fixture_app.models.tournament import Tournament  # noqa: F401
from fixture_app.models.zone import Zone  # noqa: F401
from fixture_app.models.zone_matchday import ZoneMatchday  # noqa: F401
