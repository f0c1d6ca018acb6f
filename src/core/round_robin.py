"""
Round-robin schedule generation.

Every team plays every other team exactly once. Pairings are spread over
n - 1 rounds (even n) or n rounds (odd n); in each round a team plays at
most once and, with an odd field, one team sits out.
"""
from itertools import combinations
from typing import List, Tuple

from .errors import InvalidBracketSize
from .models import Match, Round, Team, copy_slot
from .schedule import apply_default_schedule

MATCH_ID_PREFIX = 'rr-r'
CIRCLE = 'circle'
GREEDY = 'greedy'
METHODS = (CIRCLE, GREEDY)


def calculate_round_robin_rounds(num_teams: int) -> int:
    if num_teams < 2:
        return 0
    return num_teams - 1 if num_teams % 2 == 0 else num_teams


def generate_pairings(teams: List[Team]) -> List[Tuple[Team, Team]]:
    """Every unordered pair of teams, in input order."""
    return list(combinations(teams, 2))


def generate_round_robin(teams: List[Team], method: str = CIRCLE) -> List[Round]:
    num_teams = len(teams)
    if num_teams < 2:
        raise InvalidBracketSize(f"A round robin needs at least 2 teams, got {num_teams}")
    if method == CIRCLE:
        schedule = _circle_schedule(num_teams)
    elif method == GREEDY:
        schedule = _greedy_schedule(num_teams)
    else:
        raise ValueError(f"Unknown round-robin method: {method}")

    rounds = []
    for round_index, pairs in enumerate(schedule):
        matches = []
        for match_index, (a, b) in enumerate(pairs):
            match = Match(
                round_index,
                match_index,
                (copy_slot(teams[a], score=None), copy_slot(teams[b], score=None)),
                id_prefix=MATCH_ID_PREFIX,
            )
            matches.append(apply_default_schedule(match))
        rounds.append(Round(f"Round {round_index + 1}", matches))
    return rounds


def _circle_schedule(num_teams: int) -> List[List[Tuple[int, int]]]:
    """
    Polygon (circle) method: fix the first position and rotate the rest.

    With an odd field a None placeholder is added; whoever faces it sits out.
    """
    positions = list(range(num_teams))
    if num_teams % 2:
        positions.append(None)
    size = len(positions)

    schedule = []
    for _ in range(size - 1):
        pairs = []
        for i in range(size // 2):
            a, b = positions[i], positions[size - 1 - i]
            if a is None or b is None:
                continue
            pairs.append((min(a, b), max(a, b)))
        schedule.append(sorted(pairs))
        positions = [positions[0], positions[-1]] + positions[1:-1]
    return schedule


def _greedy_schedule(num_teams: int) -> List[List[Tuple[int, int]]]:
    """
    First-fit distribution: each round takes the first unused pairing whose
    teams are both free, until the per-round quota is reached.

    Not guaranteed to place every pairing (n=5 leaves two unscheduled).
    """
    remaining = list(combinations(range(num_teams), 2))
    matches_per_round = num_teams // 2
    schedule = []

    for _ in range(calculate_round_robin_rounds(num_teams)):
        busy = set()
        pairs = []
        for pairing in list(remaining):
            if len(pairs) == matches_per_round:
                break
            a, b = pairing
            if a in busy or b in busy:
                continue
            pairs.append(pairing)
            busy.update(pairing)
            remaining.remove(pairing)
        if pairs:
            schedule.append(pairs)
    return schedule
