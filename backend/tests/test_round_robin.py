"""
Tests for the round-robin builder.

Covers:
- exact rotation/home-away contract on small inputs
- structural properties for every team count up to 14
- second leg mirroring
- seed determinism and seed round-trip
"""

from collections import Counter
from itertools import combinations

import pytest

from fixture_app.services.round_robin import (
    Leg,
    Pairing,
    build_round_robin,
    find_schedule_violations,
    resolve_team_order,
    schedule_to_preview,
)


def _pairs(schedule, matchday):
    return [(p.home_team_id, p.away_team_id) for p in schedule.pairings if p.matchday == matchday]


def _bye(schedule, matchday):
    byes = [b.team_id for b in schedule.byes if b.matchday == matchday]
    assert len(byes) <= 1
    return byes[0] if byes else None


# ============================================================================
# Exact contract
# ============================================================================


def test_four_teams_single_leg_exact_rounds():
    schedule = build_round_robin([1, 2, 3, 4], double_round=False, shuffle=False)

    assert schedule.total_rounds == 3
    assert schedule.total_matchdays == 3
    assert len(schedule.first_leg) == 6
    assert schedule.second_leg == []
    assert schedule.byes == []
    assert schedule.seed is None

    assert _pairs(schedule, 1) == [(1, 4), (2, 3)]
    # Odd round index: home/away swapped
    assert _pairs(schedule, 2) == [(3, 1), (2, 4)]
    assert _pairs(schedule, 3) == [(1, 2), (3, 4)]


def test_five_teams_single_leg_byes():
    schedule = build_round_robin([1, 2, 3, 4, 5], double_round=False, shuffle=False)

    assert schedule.total_rounds == 5
    for matchday in range(1, 6):
        assert len(_pairs(schedule, matchday)) == 2
        assert _bye(schedule, matchday) is not None

    assert _bye(schedule, 1) == 5
    assert _pairs(schedule, 1) == [(1, 4), (2, 3)]
    assert _bye(schedule, 2) == 4
    assert _pairs(schedule, 2) == [(3, 5), (2, 1)]


def test_two_teams():
    single = build_round_robin([7, 9], double_round=False)
    assert single.total_rounds == 1
    assert [(p.matchday, p.home_team_id, p.away_team_id) for p in single.pairings] == [(1, 7, 9)]
    assert single.byes == []

    double = build_round_robin([7, 9], double_round=True)
    assert double.total_matchdays == 2
    assert double.second_leg == [Pairing(matchday=2, leg=Leg.SECOND, home_team_id=9, away_team_id=7)]


def test_duplicates_are_dropped_keeping_first_order():
    schedule = build_round_robin([3, 1, 3, 2, 1, 4], double_round=False)
    assert schedule.team_ids == [3, 1, 2, 4]
    assert _pairs(schedule, 1) == [(3, 4), (1, 2)]


def test_fewer_than_two_teams_rejected():
    with pytest.raises(ValueError):
        build_round_robin([5], double_round=False)
    with pytest.raises(ValueError):
        build_round_robin([5, 5, 5], double_round=False)
    with pytest.raises(ValueError):
        build_round_robin([], double_round=False)


# ============================================================================
# Structural properties
# ============================================================================


@pytest.mark.parametrize("n", [2, 4, 6, 8, 10, 12, 14])
def test_even_team_counts(n):
    teams = list(range(1, n + 1))
    schedule = build_round_robin(teams, double_round=False)

    assert schedule.total_rounds == n - 1
    assert schedule.byes == []
    for matchday in range(1, n):
        playing = [t for pair in _pairs(schedule, matchday) for t in pair]
        assert sorted(playing) == teams

    met = Counter(frozenset((p.home_team_id, p.away_team_id)) for p in schedule.first_leg)
    assert set(met) == {frozenset(c) for c in combinations(teams, 2)}
    assert set(met.values()) == {1}
    assert find_schedule_violations(schedule) == []


@pytest.mark.parametrize("n", [3, 5, 7, 9, 11, 13])
def test_odd_team_counts(n):
    teams = list(range(1, n + 1))
    schedule = build_round_robin(teams, double_round=False)

    assert schedule.total_rounds == n
    bye_counts = Counter(b.team_id for b in schedule.byes_first_leg)
    assert sorted(bye_counts) == teams
    assert set(bye_counts.values()) == {1}

    for matchday in range(1, n + 1):
        playing = [t for pair in _pairs(schedule, matchday) for t in pair]
        assert len(playing) == n - 1
        assert len(set(playing)) == n - 1
        assert _bye(schedule, matchday) not in playing

    met = Counter(frozenset((p.home_team_id, p.away_team_id)) for p in schedule.first_leg)
    assert len(met) == n * (n - 1) // 2
    assert set(met.values()) == {1}
    assert find_schedule_violations(schedule) == []


@pytest.mark.parametrize("n", [2, 3, 6, 9])
def test_second_leg_mirrors_first(n):
    schedule = build_round_robin(list(range(1, n + 1)), double_round=True)
    offset = schedule.total_rounds

    assert schedule.total_matchdays == offset * 2
    mirrored = {(p.matchday, p.home_team_id, p.away_team_id) for p in schedule.second_leg}
    assert len(schedule.second_leg) == len(schedule.first_leg)
    for p in schedule.first_leg:
        assert (p.matchday + offset, p.away_team_id, p.home_team_id) in mirrored
    assert all(p.leg == Leg.SECOND for p in schedule.second_leg)

    assert [(b.matchday + offset, b.team_id) for b in schedule.byes_first_leg] == [
        (b.matchday, b.team_id) for b in schedule.byes_second_leg
    ]
    assert find_schedule_violations(schedule) == []


# ============================================================================
# Seeds
# ============================================================================


def test_same_seed_same_schedule():
    teams = [11, 12, 13, 14, 15, 16, 17]
    a = build_round_robin(teams, double_round=True, shuffle=True, seed=4242)
    b = build_round_robin(teams, double_round=True, shuffle=True, seed=4242)

    assert a.seed == b.seed == 4242
    assert a.pairings == b.pairings
    assert a.byes == b.byes


def test_generated_seed_round_trip():
    teams = [21, 22, 23, 24, 25, 26]
    first = build_round_robin(teams, double_round=True, shuffle=True)
    assert first.seed is not None

    again = build_round_robin(teams, double_round=True, shuffle=True, seed=first.seed)
    assert again.pairings == first.pairings
    assert again.team_ids == first.team_ids


def test_seed_without_shuffle_flag_still_shuffles():
    teams = list(range(1, 11))
    order, seed = resolve_team_order(teams, shuffle=False, seed=99)
    assert seed == 99
    assert order == build_round_robin(teams, shuffle=True, seed=99).team_ids


def test_no_shuffle_keeps_order():
    order, seed = resolve_team_order([4, 2, 9], shuffle=False)
    assert order == [4, 2, 9]
    assert seed is None


# ============================================================================
# Helpers
# ============================================================================


def test_find_schedule_violations_reports_clashes():
    schedule = build_round_robin([1, 2, 3, 4], double_round=False)
    schedule.first_leg.append(Pairing(matchday=1, leg=Leg.FIRST, home_team_id=1, away_team_id=2))

    violations = find_schedule_violations(schedule)
    assert any("team 1 appears more than once" in v for v in violations)
    assert any("meet more than once" in v for v in violations)


def test_preview_shape():
    schedule = build_round_robin([1, 2, 3], double_round=True, shuffle=False)
    preview = schedule_to_preview(10, schedule)

    assert preview["zone_id"] == 10
    assert preview["double_round"] is True
    assert preview["total_matchdays"] == 6
    assert preview["seed"] is None
    assert [md["matchday"] for md in preview["matchdays"]] == [1, 2, 3, 4, 5, 6]
    assert preview["matchdays"][0] == {
        "matchday": 1,
        "leg": "FIRST",
        "pairings": [{"home_team_id": 1, "away_team_id": 2}],
        "bye_team_id": 3,
    }
    assert preview["matchdays"][3]["leg"] == "SECOND"
    assert preview["matchdays"][3]["pairings"] == [{"home_team_id": 2, "away_team_id": 1}]
    assert preview["matchdays"][3]["bye_team_id"] == 3
