# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from fixture_app.models.category import TournamentCategory  # noqa: F401
from fixture_app.models.club import Club, ClubZone  # noqa: F401
from fixture_app.models.match import Match, MatchCategory  # noqa: F401
from fixture_app.models.tournament import Tournament  # noqa: F401
from fixture_app.models.zone import Zone  # noqa: F401
from fixture_app.models.zone_matchday import ZoneMatchday  # noqa: F401
