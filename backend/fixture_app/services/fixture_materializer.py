"""
Turns an abstract RoundRobinSchedule into persisted matches.

One Match per pairing, one MatchCategory per match per category (kickoff time
copied from the category), then the matchday ledger is reseeded. Nothing here
commits: the caller's unit of work decides, so a failure leaves no partial rounds.
"""

from typing import List, Sequence

from sqlmodel import Session

from fixture_app.models.match import Match, MatchCategory, MatchLeg, MatchStatus
from fixture_app.services.matchday_ledger import seed_matchdays
from fixture_app.services.round_robin import RoundRobinSchedule
from fixture_app.services.zone_snapshot import CategorySnapshot


def materialize_schedule(
    session: Session,
    zone_id: int,
    tournament_id: int,
    schedule: RoundRobinSchedule,
    categories: Sequence[CategorySnapshot],
) -> List[Match]:
    matches: List[Match] = []

    for pairing in sorted(schedule.pairings, key=lambda p: p.matchday):
        match = Match(
            tournament_id=tournament_id,
            zone_id=zone_id,
            matchday=pairing.matchday,
            leg=MatchLeg(pairing.leg.value),
            home_club_id=pairing.home_team_id,
            away_club_id=pairing.away_team_id,
            status=MatchStatus.SCHEDULED,
        )
        session.add(match)
        matches.append(match)

    # Match ids are needed for the category rows
    session.flush()

    for match in matches:
        for category in categories:
            session.add(
                MatchCategory(
                    match_id=match.id,
                    tournament_category_id=category.id,
                    kickoff_time=category.kickoff_time,
                    counts_for_general=category.counts_for_general,
                )
            )

    seed_matchdays(session, zone_id, [plan.matchday for plan in schedule.matchdays()])
    session.flush()
    return matches
