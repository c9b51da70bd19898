from fixture_app.models.category import TournamentCategory
from fixture_app.models.club import Club, ClubZone
from fixture_app.models.match import FINISHED_MATCH_STATUSES, Match, MatchCategory, MatchLeg, MatchStatus
from fixture_app.models.tournament import Tournament, TournamentStatus
from fixture_app.models.zone import Zone, ZoneStatus
from fixture_app.models.zone_matchday import MatchdayStatus, ZoneMatchday

__all__ = [
    "Tournament",
    "TournamentStatus",
    "TournamentCategory",
    "Club",
    "ClubZone",
    "Zone",
    "ZoneStatus",
    "Match",
    "MatchCategory",
    "MatchLeg",
    "MatchStatus",
    "FINISHED_MATCH_STATUSES",
    "ZoneMatchday",
    "MatchdayStatus",
]
