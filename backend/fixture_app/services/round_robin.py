"""
Round-robin fixture builder (circle method).

Pure functions only: no database, no configuration, no shared state. Given the
same team order and seed the output is identical, which is what lets a preview
be committed later without the matchdays moving around.

Rotation contract (clients display these matchdays, so the order is fixed):
- odd team counts get a "no team" slot at the pivot position (index 0)
- round r pairs position i with position M-1-i
- even rounds (0-based) keep position i at home, odd rounds swap home/away
- after each round the last element moves to index 1; index 0 never moves
- the second leg mirrors the first with home/away swapped, matchdays continuing
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fixture_app.services.seeded_random import generate_seed, seeded_shuffle


class Leg(str, Enum):
    FIRST = "FIRST"
    SECOND = "SECOND"


@dataclass(frozen=True)
class Pairing:
    matchday: int
    leg: Leg
    home_team_id: int
    away_team_id: int


@dataclass(frozen=True)
class Bye:
    matchday: int
    leg: Leg
    team_id: int


@dataclass(frozen=True)
class MatchdayPlan:
    matchday: int
    leg: Leg
    pairings: List[Pairing]
    bye_team_id: Optional[int] = None


@dataclass
class RoundRobinSchedule:
    first_leg: List[Pairing]
    second_leg: List[Pairing]
    byes_first_leg: List[Bye]
    byes_second_leg: List[Bye]
    total_rounds: int  # rounds per leg
    seed: Optional[int] = None
    double_round: bool = False
    team_ids: List[int] = field(default_factory=list)  # order actually used for pairing

    @property
    def total_matchdays(self) -> int:
        return max((plan.matchday for plan in self.matchdays()), default=0)

    @property
    def pairings(self) -> List[Pairing]:
        return self.first_leg + self.second_leg

    @property
    def byes(self) -> List[Bye]:
        return self.byes_first_leg + self.byes_second_leg

    def matchdays(self) -> List[MatchdayPlan]:
        """Pairings grouped by matchday, ascending."""
        by_matchday: Dict[int, List[Pairing]] = defaultdict(list)
        legs: Dict[int, Leg] = {}
        for pairing in self.pairings:
            by_matchday[pairing.matchday].append(pairing)
            legs[pairing.matchday] = pairing.leg
        byes: Dict[int, int] = {}
        for bye in self.byes:
            byes[bye.matchday] = bye.team_id
            legs.setdefault(bye.matchday, bye.leg)

        return [
            MatchdayPlan(
                matchday=matchday,
                leg=legs[matchday],
                pairings=by_matchday.get(matchday, []),
                bye_team_id=byes.get(matchday),
            )
            for matchday in sorted(legs)
        ]


def dedupe_team_ids(team_ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping the first occurrence order."""
    return list(dict.fromkeys(team_ids))


def resolve_team_order(
    team_ids: Sequence[int], shuffle: bool = False, seed: Optional[int] = None
) -> Tuple[List[int], Optional[int]]:
    """
    Returns (team order to pair, seed used).

    Shuffles when shuffle is requested or a seed is supplied; without either the
    input order is kept and the seed is None.
    """
    teams = dedupe_team_ids(team_ids)
    if not shuffle and seed is None:
        return teams, None

    resolved_seed = seed if seed is not None else generate_seed()
    return seeded_shuffle(teams, resolved_seed), resolved_seed


def mirror_pairings(pairings: Sequence[Pairing], offset: int) -> List[Pairing]:
    return [
        Pairing(
            matchday=p.matchday + offset,
            leg=Leg.SECOND,
            home_team_id=p.away_team_id,
            away_team_id=p.home_team_id,
        )
        for p in pairings
    ]


def mirror_byes(byes: Sequence[Bye], offset: int) -> List[Bye]:
    return [Bye(matchday=b.matchday + offset, leg=Leg.SECOND, team_id=b.team_id) for b in byes]


def build_round_robin(
    team_ids: Sequence[int],
    double_round: bool = True,
    shuffle: bool = False,
    seed: Optional[int] = None,
) -> RoundRobinSchedule:
    """
    Build the complete pairing schedule for a zone.

    Args:
        team_ids: Team identifiers; duplicates are dropped
        double_round: Also build the mirrored second leg
        shuffle: Randomize the initial order (seed generated if not supplied)
        seed: Explicit seed; implies shuffling

    Returns:
        RoundRobinSchedule. For N teams each leg has N-1 rounds (N even) or N rounds (N odd).

    Raises:
        ValueError: fewer than two distinct teams
    """
    teams, resolved_seed = resolve_team_order(team_ids, shuffle=shuffle, seed=seed)
    if len(teams) < 2:
        raise ValueError("At least two distinct teams are required to build a round robin")

    arrangement: List[Optional[int]] = list(teams)
    if len(arrangement) % 2 == 1:
        arrangement.insert(0, None)

    slots = len(arrangement)
    total_rounds = slots - 1

    first_leg: List[Pairing] = []
    byes_first_leg: List[Bye] = []

    for round_index in range(total_rounds):
        matchday = round_index + 1
        for i in range(slots // 2):
            a = arrangement[i]
            b = arrangement[slots - 1 - i]
            if a is None or b is None:
                byes_first_leg.append(Bye(matchday=matchday, leg=Leg.FIRST, team_id=b if a is None else a))
                continue
            home, away = (a, b) if round_index % 2 == 0 else (b, a)
            first_leg.append(Pairing(matchday=matchday, leg=Leg.FIRST, home_team_id=home, away_team_id=away))

        # Rotate: keep index 0, move last to index 1
        arrangement.insert(1, arrangement.pop())

    second_leg: List[Pairing] = []
    byes_second_leg: List[Bye] = []
    if double_round:
        second_leg = mirror_pairings(first_leg, total_rounds)
        byes_second_leg = mirror_byes(byes_first_leg, total_rounds)

    return RoundRobinSchedule(
        first_leg=first_leg,
        second_leg=second_leg,
        byes_first_leg=byes_first_leg,
        byes_second_leg=byes_second_leg,
        total_rounds=total_rounds,
        seed=resolved_seed,
        double_round=double_round,
        team_ids=teams,
    )


def find_schedule_violations(schedule: RoundRobinSchedule) -> List[str]:
    """
    Structural problems in a schedule, empty when valid.

    Checks that nobody plays itself, that no team appears twice in one matchday
    (pairings and bye together) and that no pair of teams meets twice in the same leg.
    """
    violations: List[str] = []
    seen_in_matchday: Dict[int, set] = defaultdict(set)
    seen_pairs: Dict[Leg, set] = defaultdict(set)

    for pairing in sorted(schedule.pairings, key=lambda p: (p.matchday, p.home_team_id, p.away_team_id)):
        if pairing.home_team_id == pairing.away_team_id:
            violations.append(f"Matchday {pairing.matchday}: team {pairing.home_team_id} cannot play itself")
            continue
        for team_id in (pairing.home_team_id, pairing.away_team_id):
            if team_id in seen_in_matchday[pairing.matchday]:
                violations.append(f"Matchday {pairing.matchday}: team {team_id} appears more than once")
            seen_in_matchday[pairing.matchday].add(team_id)
        pair = frozenset((pairing.home_team_id, pairing.away_team_id))
        if pair in seen_pairs[pairing.leg]:
            violations.append(
                f"{pairing.leg.value} leg: teams {pairing.home_team_id} and {pairing.away_team_id} meet more than once"
            )
        seen_pairs[pairing.leg].add(pair)

    for bye in schedule.byes:
        if bye.team_id in seen_in_matchday[bye.matchday]:
            violations.append(f"Matchday {bye.matchday}: team {bye.team_id} has a bye but also plays")

    return violations


def schedule_to_preview(zone_id: int, schedule: RoundRobinSchedule) -> Dict[str, Any]:
    """Preview artifact: the whole schedule without persisted identities."""
    matchdays = []
    for plan in schedule.matchdays():
        item: Dict[str, Any] = {
            "matchday": plan.matchday,
            "leg": plan.leg.value,
            "pairings": [{"home_team_id": p.home_team_id, "away_team_id": p.away_team_id} for p in plan.pairings],
        }
        if plan.bye_team_id is not None:
            item["bye_team_id"] = plan.bye_team_id
        matchdays.append(item)

    return {
        "zone_id": zone_id,
        "double_round": schedule.double_round,
        "total_matchdays": schedule.total_matchdays,
        "seed": schedule.seed,
        "matchdays": matchdays,
    }
