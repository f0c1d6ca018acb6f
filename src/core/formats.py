"""
Bracket generation entry point: validates a roster and dispatches on the
bracket type.
"""
import logging
from typing import Iterable, List

from .elimination import generate_single_elimination
from .errors import InvalidBracketSize, InvalidTeam, UnsupportedBracketType
from .models import BYE_ID_PREFIX, BracketType, Round, Team
from .round_robin import CIRCLE, generate_round_robin

logger = logging.getLogger(__name__)

# Double elimination only produces the winners bracket (no losers bracket,
# no grand final).
SUPPORTS_LOSERS_BRACKET = False

DEFAULT_TEAM_ID_PREFIX = 'team-'


def validate_bracket_size(value) -> int:
    """Return value as a team count, or raise InvalidBracketSize."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidBracketSize(f"Team count must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidBracketSize(f"Team count must be an integer, got {value}")
        value = int(value)
    if value < 0:
        raise InvalidBracketSize(f"Team count cannot be negative, got {value}")
    if value < 2:
        raise InvalidBracketSize(f"A bracket needs at least 2 teams, got {value}")
    return value


def validate_bracket_type(bracket_type: str) -> str:
    if bracket_type not in BracketType.ALL:
        raise UnsupportedBracketType(f"Unknown bracket type: {bracket_type!r}")
    return bracket_type


def validate_teams(teams: List[Team]):
    validate_bracket_size(len(teams))
    seen = set()
    for team in teams:
        if not isinstance(team, Team) or team.is_bye:
            raise InvalidTeam(f"Not a team: {team!r}")
        if str(team.id).startswith(BYE_ID_PREFIX):
            raise InvalidTeam(f"Team id {team.id!r} uses the reserved '{BYE_ID_PREFIX}' prefix")
        if team.id in seen:
            raise InvalidTeam(f"Duplicate team id: {team.id!r}")
        seen.add(team.id)


def generate_bracket(teams: List[Team], bracket_type: str, round_robin_method: str = CIRCLE) -> List[Round]:
    """
    Generate the rounds of a bracket for the given teams.

    Either returns a complete structure or raises; the team list is never
    modified.
    """
    teams = list(teams)
    validate_bracket_type(bracket_type)
    validate_teams(teams)

    if bracket_type == BracketType.SINGLE_ELIMINATION:
        return generate_single_elimination(teams)
    if bracket_type == BracketType.DOUBLE_ELIMINATION:
        logger.warning("Double elimination is not fully supported: generating the winners bracket only")
        return generate_single_elimination(teams)
    return generate_round_robin(teams, round_robin_method)


def is_elimination(bracket_type: str) -> bool:
    return bracket_type in BracketType.ELIMINATION_TYPES


def default_team_roster(count: int, existing: Iterable[Team] = ()) -> List[Team]:
    """
    Build `count` default-named teams whose ids do not clash with `existing`.

    Names continue the numbering after the existing roster (Team 5, Team 6...).
    """
    used_ids = {team.id for team in existing}
    offset = len(used_ids)
    roster = []
    k = 1
    while len(roster) < count:
        team_id = f"{DEFAULT_TEAM_ID_PREFIX}{k}"
        if team_id not in used_ids:
            used_ids.add(team_id)
            roster.append(Team(name=f"Team {offset + len(roster) + 1}", id=team_id))
        k += 1
    return roster
