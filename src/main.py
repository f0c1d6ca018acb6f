# Command line entry point: print the bracket generated for a team list

import argparse
import sys
import yaml
from core.errors import BracketError
from core.formats import generate_bracket
from core.models import BracketType, Team
from core.round_robin import CIRCLE, METHODS


def load_teams(file_path):
    """Read teams from YAML: a list of names, or of mappings with name/id/attributes."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('teams', [])
    teams = []
    for entry in data:
        if isinstance(entry, dict):
            attributes = {k: v for k, v in entry.items() if k not in ('name', 'id')}
            teams.append(Team(name=str(entry['name']), id=entry.get('id'), attributes=attributes))
        else:
            teams.append(Team(name=str(entry)))
    return teams


def format_slot(team):
    if team is None:
        return "TBD"
    return team.name


def print_bracket(rounds):
    first_round = True
    for round_ in rounds:
        if not first_round:
            print()
        print(f"# {round_.name}")
        for match in round_.matches:
            print(f"{match.id} {match.start_time} @ {match.court}: "
                  f"{format_slot(match.teams[0])} vs {format_slot(match.teams[1])}")
        first_round = False


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a tournament bracket from a team list.')
    parser.add_argument('teams_file', help='YAML file with the teams, in seeding order')
    parser.add_argument('--type', dest='bracket_type', default=BracketType.SINGLE_ELIMINATION,
                        choices=BracketType.ALL, help='Bracket type')
    parser.add_argument('--round-robin-method', default=CIRCLE, choices=METHODS,
                        help='How round-robin pairings are spread over rounds')
    args = parser.parse_args(argv)

    teams = load_teams(args.teams_file)
    try:
        rounds = generate_bracket(teams, args.bracket_type, args.round_robin_method)
    except BracketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_bracket(rounds)
    return 0


if __name__ == '__main__':
    sys.exit(main())
