"""
Tests for bracket generation dispatch and roster validation.
"""
import logging
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import make_teams
from core.errors import InvalidBracketSize, InvalidTeam, UnsupportedBracketType
from core.formats import (
    SUPPORTS_LOSERS_BRACKET,
    default_team_roster,
    generate_bracket,
    validate_bracket_size,
)
from core.models import BracketType, ByeTeam, Team


class TestGenerateBracket:
    """Tests for generate_bracket."""

    def test_single_elimination(self, four_teams):
        rounds = generate_bracket(four_teams, BracketType.SINGLE_ELIMINATION)
        assert [r.name for r in rounds] == ["Semifinals", "Final"]

    def test_round_robin(self, four_teams):
        rounds = generate_bracket(four_teams, BracketType.ROUND_ROBIN)
        assert len(rounds) == 3

    def test_double_elimination_is_winners_bracket_only(self, four_teams, caplog):
        """Without a losers bracket the result equals single elimination."""
        assert SUPPORTS_LOSERS_BRACKET is False
        with caplog.at_level(logging.WARNING):
            double = generate_bracket(four_teams, BracketType.DOUBLE_ELIMINATION)
        single = generate_bracket(four_teams, BracketType.SINGLE_ELIMINATION)
        assert [r.to_dict() for r in double] == [r.to_dict() for r in single]
        assert "winners bracket only" in caplog.text

    def test_unknown_type(self, four_teams):
        with pytest.raises(UnsupportedBracketType):
            generate_bracket(four_teams, 'swiss')

    @pytest.mark.parametrize("names", [(), ('A',)])
    def test_too_few_teams(self, names):
        with pytest.raises(InvalidBracketSize):
            generate_bracket(make_teams(*names), BracketType.SINGLE_ELIMINATION)

    def test_duplicate_ids_rejected(self):
        teams = [Team("A", id="x"), Team("B", id="x")]
        with pytest.raises(InvalidTeam):
            generate_bracket(teams, BracketType.SINGLE_ELIMINATION)

    def test_bye_prefix_reserved(self):
        teams = [Team("A", id="bye-0"), Team("B")]
        with pytest.raises(InvalidTeam):
            generate_bracket(teams, BracketType.SINGLE_ELIMINATION)

    def test_bye_in_roster_rejected(self):
        with pytest.raises(InvalidTeam):
            generate_bracket([Team("A"), ByeTeam(1)], BracketType.ROUND_ROBIN)

    def test_accepts_any_sequence(self, four_teams):
        rounds = generate_bracket(tuple(four_teams), BracketType.SINGLE_ELIMINATION)
        assert len(rounds) == 2


class TestValidateBracketSize:
    """Tests for requested team counts."""

    def test_valid(self):
        assert validate_bracket_size(2) == 2
        assert validate_bracket_size(8.0) == 8

    @pytest.mark.parametrize("value", [-4, 0, 1, 2.5, "8", None, True])
    def test_invalid(self, value):
        with pytest.raises(InvalidBracketSize):
            validate_bracket_size(value)


class TestDefaultTeamRoster:
    """Tests for default-named rosters."""

    def test_fresh_roster(self):
        roster = default_team_roster(3)
        assert [t.name for t in roster] == ["Team 1", "Team 2", "Team 3"]
        assert [t.id for t in roster] == ["team-1", "team-2", "team-3"]

    def test_extends_existing_roster(self):
        existing = [Team("Lions", id="team-2"), Team("Tigers", id="tigers")]
        roster = default_team_roster(2, existing=existing)
        assert [t.name for t in roster] == ["Team 3", "Team 4"]
        assert [t.id for t in roster] == ["team-1", "team-3"]
