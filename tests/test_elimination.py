"""
Unit tests for single elimination bracket generation.
"""
import math
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import make_teams
from core.elimination import (
    calculate_bracket_size,
    calculate_byes,
    calculate_num_rounds,
    generate_single_elimination,
    get_round_name,
    next_match_position,
    pad_with_byes,
)
from core.errors import InvalidBracketSize
from core.models import Team


def numbered_teams(n):
    return [Team(name=f"Team {i}", id=f"t{i}") for i in range(1, n + 1)]


class TestBracketHelpers:
    """Tests for bracket helper functions."""

    def test_get_round_name_final(self):
        """Test round name for 2 teams (Final)."""
        assert get_round_name(2, 2) == "Final"

    def test_get_round_name_semifinals(self):
        assert get_round_name(4, 1) == "Semifinals"

    def test_get_round_name_quarterfinals(self):
        assert get_round_name(8, 0) == "Quarterfinals"

    def test_get_round_name_round_of_16_and_32(self):
        assert get_round_name(16, 0) == "Round of 16"
        assert get_round_name(32, 0) == "Round of 32"

    def test_get_round_name_generic(self):
        """Fields above 32 fall back to the round number."""
        assert get_round_name(64, 0) == "Round 1"
        assert get_round_name(128, 1) == "Round 2"

    def test_calculate_bracket_size_exact_power(self):
        """Test bracket size for exact power of 2."""
        assert calculate_bracket_size(8) == 8
        assert calculate_bracket_size(16) == 16
        assert calculate_bracket_size(4) == 4

    def test_calculate_bracket_size_not_power(self):
        """Test bracket size rounds up to next power of 2."""
        assert calculate_bracket_size(3) == 4
        assert calculate_bracket_size(5) == 8
        assert calculate_bracket_size(9) == 16
        assert calculate_bracket_size(12) == 16

    def test_calculate_bracket_size_zero(self):
        assert calculate_bracket_size(0) == 0

    def test_calculate_byes(self):
        assert calculate_byes(8) == 0
        assert calculate_byes(5) == 3
        assert calculate_byes(6) == 2
        assert calculate_byes(12) == 4

    def test_calculate_num_rounds(self):
        assert calculate_num_rounds(2) == 1
        assert calculate_num_rounds(3) == 2
        assert calculate_num_rounds(8) == 3
        assert calculate_num_rounds(9) == 4

    def test_next_match_position(self):
        """Match i feeds slot i % 2 of match i // 2."""
        assert next_match_position(0) == (0, 0)
        assert next_match_position(1) == (0, 1)
        assert next_match_position(2) == (1, 0)
        assert next_match_position(7) == (3, 1)


class TestPadding:
    """Tests for Bye padding."""

    def test_byes_appended_in_order(self):
        padded = pad_with_byes(make_teams('A', 'B', 'C'))
        assert [t.name for t in padded] == ['A', 'B', 'C', 'Bye']
        assert padded[3].is_bye

    def test_bye_ids_unique(self):
        padded = pad_with_byes(numbered_teams(5))
        bye_ids = [t.id for t in padded if t.is_bye]
        assert len(bye_ids) == 3
        assert len(set(bye_ids)) == 3

    def test_no_padding_for_power_of_two(self):
        assert not any(t.is_bye for t in pad_with_byes(numbered_teams(8)))


class TestGenerateSingleElimination:
    """Tests for the full single elimination structure."""

    def test_four_teams(self, four_teams):
        """A,B,C,D gives (A vs B), (C vs D) and an empty final."""
        rounds = generate_single_elimination(four_teams)
        assert len(rounds) == 2
        first = rounds[0].matches
        assert [(m.teams[0].name, m.teams[1].name) for m in first] == [('A', 'B'), ('C', 'D')]
        assert rounds[1].name == "Final"
        assert rounds[1].matches[0].teams == [None, None]

    def test_three_teams_padded_with_bye(self):
        """A,B,C gives (A vs B), (C vs Bye)."""
        rounds = generate_single_elimination(make_teams('A', 'B', 'C'))
        assert len(rounds) == 2
        first = rounds[0].matches
        assert (first[0].teams[0].name, first[0].teams[1].name) == ('A', 'B')
        assert first[1].teams[0].name == 'C'
        assert first[1].teams[1].is_bye
        assert rounds[1].matches[0].teams == [None, None]

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8, 9, 13, 16, 17, 33])
    def test_round_and_match_counts(self, n):
        """ceil(log2 n) rounds, halving match counts, one final match."""
        rounds = generate_single_elimination(numbered_teams(n))
        assert len(rounds) == math.ceil(math.log2(n))
        assert len(rounds[0].matches) == calculate_bracket_size(n) // 2
        assert len(rounds[-1].matches) == 1
        for k in range(1, len(rounds)):
            assert len(rounds[k].matches) == math.ceil(len(rounds[k - 1].matches) / 2)

    @pytest.mark.parametrize("n", [3, 5, 6, 7, 12])
    def test_bye_count(self, n):
        rounds = generate_single_elimination(numbered_teams(n))
        byes = [t for m in rounds[0].matches for t in m.teams if t.is_bye]
        assert len(byes) == calculate_bracket_size(n) - n

    @pytest.mark.parametrize("n", [3, 6, 7])
    def test_byes_face_real_teams(self, n):
        """Sequential padding never pairs two byes when byes <= half the field."""
        rounds = generate_single_elimination(numbered_teams(n))
        for match in rounds[0].matches:
            assert not (match.teams[0].is_bye and match.teams[1].is_bye)

    def test_later_rounds_start_empty(self, eight_teams):
        rounds = generate_single_elimination(eight_teams)
        for round_ in rounds[1:]:
            for match in round_.matches:
                assert match.teams == [None, None]
                assert match.winner_index is None

    def test_round_names(self, eight_teams):
        rounds = generate_single_elimination(eight_teams)
        assert [r.name for r in rounds] == ["Quarterfinals", "Semifinals", "Final"]

    def test_match_ids_and_indices(self, eight_teams):
        rounds = generate_single_elimination(eight_teams)
        for k, round_ in enumerate(rounds):
            assert [m.match_index for m in round_.matches] == list(range(len(round_.matches)))
            assert all(m.round_index == k for m in round_.matches)
            assert all(m.id == f"r{k}-m{m.match_index}" for m in round_.matches)

    def test_default_schedule_applied(self, four_teams):
        rounds = generate_single_elimination(four_teams)
        assert rounds[0].matches[0].start_time == "13:00"
        assert rounds[0].matches[1].start_time == "13:45"
        assert rounds[0].matches[0].court == "Main Arena"
        assert rounds[1].matches[0].start_time == "15:00"

    def test_input_not_mutated(self):
        teams = make_teams('A', 'B', 'C')
        teams[0].score = 5
        generate_single_elimination(teams)
        assert len(teams) == 3
        assert teams[0].score == 5

    def test_slots_are_copies_without_scores(self):
        teams = make_teams('A', 'B')
        teams[0].score = 5
        rounds = generate_single_elimination(teams)
        slot = rounds[0].matches[0].teams[0]
        assert slot is not teams[0]
        assert slot.score is None

    def test_deterministic(self, eight_teams):
        first = [r.to_dict() for r in generate_single_elimination(eight_teams)]
        second = [r.to_dict() for r in generate_single_elimination(eight_teams)]
        assert first == second

    @pytest.mark.parametrize("n", [0, 1])
    def test_too_few_teams(self, n):
        with pytest.raises(InvalidBracketSize):
            generate_single_elimination(numbered_teams(n))
