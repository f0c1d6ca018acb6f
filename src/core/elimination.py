"""
Single elimination bracket generation.
"""
import math
from typing import List, Optional, Tuple

from .errors import InvalidBracketSize
from .models import ByeTeam, Match, Round, Team, copy_slot
from .schedule import apply_default_schedule

NAMED_ROUNDS = {
    2: "Final",
    4: "Semifinals",
    8: "Quarterfinals",
    16: "Round of 16",
    32: "Round of 32",
}


def get_round_name(teams_in_round: int, round_index: int) -> str:
    """Get the name of a round from the number of teams entering it."""
    return NAMED_ROUNDS.get(teams_in_round, f"Round {round_index + 1}")


def calculate_num_rounds(num_teams: int) -> int:
    if num_teams < 2:
        return 0
    return math.ceil(math.log2(num_teams))


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** calculate_num_rounds(num_teams)


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_teams) - num_teams


def next_match_position(match_index: int) -> Tuple[int, int]:
    """
    Map a match to the slot its winner fills in the next round.

    Returns (next_match_index, slot_index): match i feeds slot i % 2 of
    match i // 2.
    """
    return match_index // 2, match_index % 2


def pad_with_byes(teams: List[Team]) -> List[Team]:
    """Append Bye placeholders so the field size is a power of 2."""
    padded = list(teams)
    bracket_size = calculate_bracket_size(len(teams))
    while len(padded) < bracket_size:
        padded.append(ByeTeam(len(padded)))
    return padded


def generate_single_elimination(teams: List[Team]) -> List[Round]:
    """
    Generate all rounds of a single elimination bracket.

    Round 0 pairs consecutive teams of the (bye-padded) list; every later
    round starts with empty slots that are filled as winners are recorded.
    The input list and its teams are never modified.
    """
    num_teams = len(teams)
    if num_teams < 2:
        raise InvalidBracketSize(f"A bracket needs at least 2 teams, got {num_teams}")

    padded = pad_with_byes(teams)
    rounds = []
    teams_in_round = len(padded)
    round_index = 0

    while teams_in_round > 1:
        round_name = get_round_name(teams_in_round, round_index)
        matches = []
        for i in range(0, teams_in_round, 2):
            slots = _first_round_slots(padded, i) if round_index == 0 else (None, None)
            match = Match(round_index, i // 2, slots)
            matches.append(apply_default_schedule(match))
        rounds.append(Round(round_name, matches))

        teams_in_round = math.ceil(teams_in_round / 2)
        round_index += 1

    return rounds


def _first_round_slots(padded: List[Team], i: int) -> Tuple[Optional[Team], Optional[Team]]:
    second = padded[i + 1] if i + 1 < len(padded) else None
    return copy_slot(padded[i], score=None), copy_slot(second, score=None)


def get_final_match(rounds: List[Round]) -> Optional[Match]:
    if not rounds or not rounds[-1].matches:
        return None
    return rounds[-1].matches[0]
