"""
Live bracket state: rounds, teams and settings plus the operations that
mutate them.

All mutations go through BracketStateManager. Each one validates its input
before touching state, runs under the manager's lock against the latest
state, and then notifies subscribers with a description of what changed so
that an external synchroniser can mirror it.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional

from .elimination import get_final_match, next_match_position
from .errors import (
    InconsistentPropagation,
    InvalidScore,
    InvalidSlot,
    InvalidTeam,
    MatchNotFound,
    TeamNotFound,
)
from .formats import (
    default_team_roster,
    generate_bracket,
    is_elimination,
    validate_bracket_size,
    validate_bracket_type,
)
from .models import BYE_ID_PREFIX, BracketSettings, Match, Round, Team, rounds_from_dicts, rounds_to_dicts
from .round_robin import CIRCLE

logger = logging.getLogger(__name__)


def find_match(rounds: List[Round], match_id: str) -> Match:
    for round_ in rounds:
        for match in round_.matches:
            if match.id == match_id:
                return match
    raise MatchNotFound(f"No match with id {match_id!r}")


def _next_slot(rounds: List[Round], match: Match):
    """Return (next_match, slot) fed by match, or (None, None) for the final."""
    if match.round_index + 1 >= len(rounds):
        return None, None
    next_index, slot = next_match_position(match.match_index)
    next_round = rounds[match.round_index + 1]
    if next_index >= len(next_round.matches):
        raise InconsistentPropagation(
            f"Match {match.id} feeds match {next_index} of round {match.round_index + 1}, "
            f"which only has {len(next_round.matches)} matches"
        )
    return next_round.matches[next_index], slot


def retract_result(rounds: List[Round], match: Match, changes: List[Dict]):
    """Void a decided match and everything its winner was carried into."""
    if match.winner_index is None:
        return
    match.winner_index = None
    changes.append({'type': 'winner_cleared', 'match_id': match.id})
    target, slot = _next_slot(rounds, match)
    if target is None or target.teams[slot] is None:
        return
    retract_result(rounds, target, changes)
    target.teams[slot] = None
    changes.append({'type': 'slot_cleared', 'match_id': target.id, 'slot': slot})


def propagate_winner(rounds: List[Round], match: Match, changes: List[Dict]):
    """Copy the winner of match, score cleared, into its next-round slot."""
    target, slot = _next_slot(rounds, match)
    if target is None:
        return
    winner = match.winner
    current = target.teams[slot]
    if current is not None and current.id == winner.id:
        return
    if current is not None:
        retract_result(rounds, target, changes)
    target.teams[slot] = winner.copy(score=None)
    changes.append({'type': 'slot_filled', 'match_id': target.id, 'slot': slot, 'team_id': winner.id})
    advance_byes(rounds, target, changes)


def advance_byes(rounds: List[Round], match: Match, changes: List[Dict]):
    """Decide a filled match holding a Bye in favour of the other slot."""
    if match.winner_index is not None or match.state != Match.READY or not match.has_bye:
        return
    first, second = match.teams
    match.winner_index = 1 if first.is_bye and not second.is_bye else 0
    changes.append({'type': 'winner_set', 'match_id': match.id, 'winner_index': match.winner_index, 'auto': True})
    propagate_winner(rounds, match, changes)


def build_rounds(teams: List[Team], bracket_type: str, round_robin_method: str = CIRCLE,
                 changes: Optional[List[Dict]] = None) -> List[Round]:
    """Generate a bracket and advance every Bye it contains."""
    rounds = generate_bracket(teams, bracket_type, round_robin_method)
    if is_elimination(bracket_type) and rounds:
        changes = changes if changes is not None else []
        for match in rounds[0].matches:
            advance_byes(rounds, match, changes)
    return rounds


def _check_slot_index(index):
    if isinstance(index, bool) or not isinstance(index, int) or index not in (0, 1):
        raise InvalidSlot(f"Slot index must be 0 or 1, got {index!r}")


class BracketStateManager:
    def __init__(self, teams=None, settings=None, rounds=None, bracket_id='main', round_robin_method=CIRCLE):
        settings = settings if settings is not None else BracketSettings()
        validate_bracket_type(settings.bracket_type)
        if teams is None:
            teams = default_team_roster(validate_bracket_size(settings.num_teams))
        self.bracket_id = bracket_id
        self.round_robin_method = round_robin_method
        self.teams = [team.copy() for team in teams]
        if rounds is None:
            settings = settings.merged({'num_teams': len(self.teams)})
            rounds = build_rounds(self.teams, settings.bracket_type, round_robin_method)
        self.settings = settings
        self.rounds = rounds
        self._lock = threading.RLock()
        self._listeners = []

    # -- Change notification ----------------------------------------------

    def subscribe(self, listener: Callable[[Dict], None]):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[Dict], None]):
        self._listeners.remove(listener)

    def _notify(self, changes: List[Dict]):
        for change in changes:
            change = {'bracket_id': self.bracket_id, **change}
            for listener in list(self._listeners):
                try:
                    listener(change)
                except Exception:
                    logger.exception(f"Bracket listener failed on {change['type']} change")

    # -- Queries -----------------------------------------------------------

    def get_match(self, match_id: str) -> Match:
        return find_match(self.rounds, match_id)

    def get_team(self, team_id: str) -> Team:
        for team in self.teams:
            if team.id == team_id:
                return team
        raise TeamNotFound(f"No team with id {team_id!r}")

    @property
    def is_elimination(self) -> bool:
        return is_elimination(self.settings.bracket_type)

    @property
    def champion(self) -> Optional[Team]:
        """Winner of the final, for elimination brackets."""
        if not self.is_elimination:
            return None
        final = get_final_match(self.rounds)
        if final is None or final.winner is None or final.winner.is_bye:
            return None
        return final.winner

    # -- Match operations --------------------------------------------------

    def set_winner(self, match_id: str, winner_index: int):
        """
        Record the winner of a match and carry it into the next round.

        Selecting the same winner again changes nothing. Selecting a different
        winner replaces the team in the next round and voids any result that
        had already been recorded downstream with the previous winner.
        """
        with self._lock:
            match = find_match(self.rounds, match_id)
            _check_slot_index(winner_index)
            team = match.teams[winner_index]
            if team is None:
                raise InvalidSlot(f"Slot {winner_index} of match {match_id} has no team yet")
            if team.is_bye:
                raise InvalidSlot(f"A Bye cannot win match {match_id}")

            changes = []
            if match.winner_index != winner_index:
                match.winner_index = winner_index
                changes.append({'type': 'winner_set', 'match_id': match.id, 'winner_index': winner_index})
            if self.is_elimination:
                propagate_winner(self.rounds, match, changes)
            self._notify(changes)
            return match

    def set_team_score(self, match_id: str, team_index: int, score: Optional[int]):
        """Set the score of one slot. Never decides the match."""
        with self._lock:
            match = find_match(self.rounds, match_id)
            _check_slot_index(team_index)
            if score is not None and (isinstance(score, bool) or not isinstance(score, int) or score < 0):
                raise InvalidScore(f"Score must be a non-negative integer, got {score!r}")
            team = match.teams[team_index]
            if team is None:
                raise InvalidSlot(f"Slot {team_index} of match {match_id} has no team yet")
            if team.is_bye:
                raise InvalidSlot(f"A Bye has no score (match {match_id})")

            team.score = score
            self._notify([{
                'type': 'score_set',
                'match_id': match.id,
                'slot': team_index,
                'team_id': team.id,
                'score': score,
            }])
            return match

    def set_match_team(self, match_id: str, team_index: int, team_id: Optional[str]):
        """
        Put a roster team (or nobody, with team_id None) into a match slot.

        Replacing the occupant voids the match result and everything it fed.
        """
        with self._lock:
            match = find_match(self.rounds, match_id)
            _check_slot_index(team_index)
            team = self.get_team(team_id) if team_id is not None else None

            current = match.teams[team_index]
            if current is not None and team is not None and current.id == team.id:
                return match
            changes = []
            retract_result(self.rounds, match, changes)
            match.teams[team_index] = team.copy(score=None) if team is not None else None
            if team is None:
                changes.append({'type': 'slot_cleared', 'match_id': match.id, 'slot': team_index})
            else:
                changes.append({'type': 'slot_filled', 'match_id': match.id, 'slot': team_index, 'team_id': team.id})
            if self.is_elimination:
                advance_byes(self.rounds, match, changes)
            self._notify(changes)
            return match

    def update_match_details(self, match_id: str, start_time=None, court=None, details=None):
        with self._lock:
            match = find_match(self.rounds, match_id)
            if start_time is not None:
                match.start_time = start_time
            if court is not None:
                match.court = court
            if details:
                match.details = {**match.details, **details}
            self._notify([{
                'type': 'match_details_updated',
                'match_id': match.id,
                'start_time': match.start_time,
                'court': match.court,
                'details': dict(match.details),
            }])
            return match

    # -- Settings and regeneration -----------------------------------------

    def set_settings(self, **partial) -> bool:
        """
        Merge settings. Changing num_teams or bracket_type rebuilds the bracket.

        Rebuilding keeps the existing teams (truncating, or appending default
        teams when the roster grows) and DISCARDS every score and winner.
        Returns True when the bracket was rebuilt.
        """
        with self._lock:
            if 'num_teams' in partial:
                partial = {**partial, 'num_teams': validate_bracket_size(partial['num_teams'])}
            if 'bracket_type' in partial:
                validate_bracket_type(partial['bracket_type'])
            settings = self.settings.merged(partial)
            regenerate = (settings.num_teams != self.settings.num_teams
                          or settings.bracket_type != self.settings.bracket_type)
            if not regenerate:
                self.settings = settings
                self._notify([{'type': 'settings_changed', 'settings': settings.to_dict()}])
                return False

            count = validate_bracket_size(settings.num_teams)
            validate_bracket_type(settings.bracket_type)
            teams = [team.copy(score=None) for team in self.teams[:count]]
            teams += default_team_roster(count - len(teams), existing=teams)
            rounds = build_rounds(teams, settings.bracket_type, self.round_robin_method)

            self.teams = teams
            self.settings = settings.merged({'num_teams': count})
            self.rounds = rounds
            logger.info(f"Bracket {self.bracket_id} rebuilt as {settings.bracket_type} with {count} teams; "
                        f"previous scores and winners discarded")
            self._notify([
                {'type': 'settings_changed', 'settings': self.settings.to_dict()},
                self._regenerated_change(),
            ])
            return True

    def regenerate(self):
        """Rebuild the bracket from the current roster, discarding results."""
        with self._lock:
            rounds = build_rounds(self.teams, self.settings.bracket_type, self.round_robin_method)
            self.rounds = rounds
            self.settings = self.settings.merged({'num_teams': len(self.teams)})
            logger.info(f"Bracket {self.bracket_id} regenerated with {len(self.teams)} teams")
            self._notify([self._regenerated_change()])
            return self.rounds

    def reset_bracket(self):
        """Start over with a default-named roster and a fresh bracket."""
        with self._lock:
            count = validate_bracket_size(self.settings.num_teams)
            teams = default_team_roster(count)
            rounds = build_rounds(teams, self.settings.bracket_type, self.round_robin_method)
            self.teams = teams
            self.rounds = rounds
            logger.info(f"Bracket {self.bracket_id} reset to {count} default teams")
            self._notify([self._regenerated_change()])
            return self.rounds

    def _regenerated_change(self) -> Dict:
        return {
            'type': 'bracket_regenerated',
            'bracket_type': self.settings.bracket_type,
            'team_ids': [team.id for team in self.teams],
            'match_ids': [match.id for round_ in self.rounds for match in round_.matches],
        }

    # -- Roster ------------------------------------------------------------

    def add_team(self, team: Team) -> Team:
        """Append a team to the roster. The bracket is left as it is."""
        with self._lock:
            if not isinstance(team, Team) or team.is_bye:
                raise InvalidTeam(f"Not a team: {team!r}")
            if str(team.id).startswith(BYE_ID_PREFIX):
                raise InvalidTeam(f"Team id {team.id!r} uses the reserved '{BYE_ID_PREFIX}' prefix")
            if any(existing.id == team.id for existing in self.teams):
                raise InvalidTeam(f"Duplicate team id: {team.id!r}")
            added = team.copy(score=None)
            self.teams.append(added)
            self._notify([{'type': 'team_added', 'team': added.to_dict()}])
            return added

    def remove_team(self, team_id: str) -> Team:
        """Drop a team from the roster. Match slots keep their teams until the next rebuild."""
        with self._lock:
            team = self.get_team(team_id)
            self.teams.remove(team)
            self._notify([{'type': 'team_removed', 'team_id': team_id}])
            return team

    def update_team(self, team_id: str, name=None, attributes=None) -> Team:
        """Edit a team's display data everywhere it appears, keeping slot scores."""
        with self._lock:
            team = self.get_team(team_id)
            if name is not None:
                team.name = name
            if attributes:
                team.attributes = {**team.attributes, **attributes}
            for round_ in self.rounds:
                for match in round_.matches:
                    for slot, occupant in enumerate(match.teams):
                        if occupant is not None and occupant.id == team_id:
                            match.teams[slot] = team.copy(score=occupant.score)
            self._notify([{'type': 'team_updated', 'team': team.to_dict()}])
            return team

    # -- Serialisation -----------------------------------------------------

    def to_dict(self) -> Dict:
        with self._lock:
            return {
                'bracket_id': self.bracket_id,
                'round_robin_method': self.round_robin_method,
                'settings': self.settings.to_dict(),
                'teams': [team.to_dict() for team in self.teams],
                'rounds': rounds_to_dicts(self.rounds),
            }

    @classmethod
    def from_dict(cls, data: Dict) -> 'BracketStateManager':
        return cls(
            teams=[Team.from_dict(t) for t in data.get('teams', [])],
            settings=BracketSettings.from_dict(data.get('settings')),
            rounds=rounds_from_dicts(data.get('rounds', [])),
            bracket_id=data.get('bracket_id', 'main'),
            round_robin_method=data.get('round_robin_method', CIRCLE),
        )

    def snapshot(self) -> 'BracketStateManager':
        """Independent copy of the current state (listeners not included)."""
        return BracketStateManager.from_dict(self.to_dict())
