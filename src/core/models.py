"""
Data models for brackets: teams, matches, rounds and settings.
"""
import copy
from typing import Dict, List, Optional

BYE_ID_PREFIX = 'bye-'
BYE_NAME = 'Bye'


class Team:
    def __init__(self, name, id=None, score=None, attributes=None):
        self.name = name
        self.id = id if id is not None else name
        self.score = score
        self.attributes = attributes if attributes else {}

    @property
    def is_bye(self):
        return False

    def copy(self, **overrides):
        """Return an independent copy, optionally replacing fields."""
        data = self.to_dict()
        data.update(overrides)
        return Team.from_dict(data)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'attributes': copy.deepcopy(self.attributes),
            'is_bye': False,
        }

    @staticmethod
    def from_dict(data: Dict) -> 'Team':
        if data.get('is_bye'):
            return ByeTeam.from_dict(data)
        return Team(
            name=data['name'],
            id=data.get('id'),
            score=data.get('score'),
            attributes=copy.deepcopy(data.get('attributes') or {}),
        )

    def __eq__(self, other):
        if not isinstance(other, Team):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, score={self.score})"


class ByeTeam(Team):
    """Placeholder opponent used to pad an elimination field.

    A bye never scores and can never be picked as a winner; its opponent
    always advances.
    """

    def __init__(self, position):
        super().__init__(name=BYE_NAME, id=f'{BYE_ID_PREFIX}{position}')
        self.position = position

    @property
    def is_bye(self):
        return True

    def copy(self, **overrides):
        return ByeTeam(self.position)

    def to_dict(self) -> Dict:
        return {'id': self.id, 'name': self.name, 'position': self.position, 'is_bye': True}

    @staticmethod
    def from_dict(data: Dict) -> 'ByeTeam':
        if 'position' in data:
            return ByeTeam(data['position'])
        return ByeTeam(int(str(data['id'])[len(BYE_ID_PREFIX):]))

    def __repr__(self):
        return f"ByeTeam(id={self.id})"


def copy_slot(team: Optional[Team], **overrides) -> Optional[Team]:
    return team.copy(**overrides) if team is not None else None


class Match:
    UNFILLED = 'unfilled'
    READY = 'ready'
    DECIDED = 'decided'

    def __init__(self, round_index, match_index, teams=(None, None), winner_index=None,
                 start_time=None, court=None, details=None, id_prefix='r'):
        self.round_index = round_index
        self.match_index = match_index
        self.teams = list(teams)
        self.winner_index = winner_index
        self.start_time = start_time
        self.court = court
        self.details = details if details else {}
        self.id_prefix = id_prefix

    @property
    def id(self):
        return f"{self.id_prefix}{self.round_index}-m{self.match_index}"

    @property
    def state(self):
        if self.winner_index is not None:
            return Match.DECIDED
        if self.teams[0] is None or self.teams[1] is None:
            return Match.UNFILLED
        return Match.READY

    @property
    def winner(self) -> Optional[Team]:
        if self.winner_index is None:
            return None
        return self.teams[self.winner_index]

    @property
    def has_bye(self):
        return any(team is not None and team.is_bye for team in self.teams)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'round_index': self.round_index,
            'match_index': self.match_index,
            'teams': [team.to_dict() if team is not None else None for team in self.teams],
            'winner_index': self.winner_index,
            'start_time': self.start_time,
            'court': self.court,
            'details': copy.deepcopy(self.details),
            'id_prefix': self.id_prefix,
        }

    @staticmethod
    def from_dict(data: Dict) -> 'Match':
        return Match(
            round_index=data['round_index'],
            match_index=data['match_index'],
            teams=[Team.from_dict(t) if t is not None else None for t in data.get('teams', [None, None])],
            winner_index=data.get('winner_index'),
            start_time=data.get('start_time'),
            court=data.get('court'),
            details=copy.deepcopy(data.get('details') or {}),
            id_prefix=data.get('id_prefix', 'r'),
        )

    def __repr__(self):
        return f"Match(id={self.id}, teams={self.teams}, winner_index={self.winner_index})"


class Round:
    def __init__(self, name, matches=None):
        self.name = name
        self.matches = matches if matches else []

    def to_dict(self) -> Dict:
        return {'name': self.name, 'matches': [m.to_dict() for m in self.matches]}

    @staticmethod
    def from_dict(data: Dict) -> 'Round':
        return Round(data['name'], [Match.from_dict(m) for m in data.get('matches', [])])

    def __repr__(self):
        return f"Round(name={self.name}, matches={len(self.matches)})"


class BracketType:
    SINGLE_ELIMINATION = 'single-elimination'
    DOUBLE_ELIMINATION = 'double-elimination'
    ROUND_ROBIN = 'round-robin'

    ALL = (SINGLE_ELIMINATION, DOUBLE_ELIMINATION, ROUND_ROBIN)
    ELIMINATION_TYPES = (SINGLE_ELIMINATION, DOUBLE_ELIMINATION)


class BracketSettings:
    DEFAULTS = {
        'bracket_type': BracketType.SINGLE_ELIMINATION,
        'num_teams': 8,
        'primary_color': '#482CFF',
        'secondary_color': '#420AB2',
        'background_color': '#111827',
        'bracket_style': 'modern',
        'theme': 'sporty',
    }

    def __init__(self, **values):
        unknown = set(values) - set(self.DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        merged = {**self.DEFAULTS, **values}
        for key, value in merged.items():
            setattr(self, key, value)

    def merged(self, partial: Dict) -> 'BracketSettings':
        return BracketSettings(**{**self.to_dict(), **partial})

    def to_dict(self) -> Dict:
        return {key: getattr(self, key) for key in self.DEFAULTS}

    @staticmethod
    def from_dict(data: Optional[Dict]) -> 'BracketSettings':
        """Build settings from stored data, ignoring keys this version does not know."""
        data = data or {}
        return BracketSettings(**{k: v for k, v in data.items() if k in BracketSettings.DEFAULTS})

    def __eq__(self, other):
        if not isinstance(other, BracketSettings):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"BracketSettings(bracket_type={self.bracket_type}, num_teams={self.num_teams})"


def rounds_to_dicts(rounds: List[Round]) -> List[Dict]:
    return [r.to_dict() for r in rounds]


def rounds_from_dicts(data: List[Dict]) -> List[Round]:
    return [Round.from_dict(r) for r in data or []]
