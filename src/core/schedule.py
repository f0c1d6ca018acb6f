"""
Default scheduling metadata (start time and court) for generated matches.
"""

TOURNAMENT_START_HOUR = 13
MINUTES_PER_MATCH = 45
MINUTES_PER_ROUND = 120
DEFAULT_COURTS = ['Main Arena', 'Side Stage', 'Velocity Hall', 'Legends Dome']


def get_match_start_time(round_index: int, match_index: int) -> str:
    """Return the default HH:MM start time of a match."""
    total_minutes = round_index * MINUTES_PER_ROUND + match_index * MINUTES_PER_MATCH
    hour = TOURNAMENT_START_HOUR + total_minutes // 60
    minute = total_minutes % 60
    return f"{hour:02d}:{minute:02d}"


def get_court_name(round_index: int, match_index: int) -> str:
    return DEFAULT_COURTS[(round_index + match_index) % len(DEFAULT_COURTS)]


def apply_default_schedule(match):
    match.start_time = get_match_start_time(match.round_index, match.match_index)
    match.court = get_court_name(match.round_index, match.match_index)
    return match
