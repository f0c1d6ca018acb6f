"""
YAML snapshots of bracket state, plus the flattened row shape a remote
synchroniser maps into its tables.
"""
import logging
import os
from typing import Dict, List, Optional

import yaml
from filelock import FileLock

from core.errors import BracketError
from core.state import BracketStateManager

logger = logging.getLogger(__name__)

STATE_FILENAME = 'bracket.yaml'
LOCK_FILENAME = '.lock'
LOCK_TIMEOUT = 10


def state_path(data_dir: str) -> str:
    return os.path.join(data_dir, STATE_FILENAME)


def get_lock(data_dir: str) -> FileLock:
    """File lock serialising writers of one data directory."""
    os.makedirs(data_dir, exist_ok=True)
    return FileLock(os.path.join(data_dir, LOCK_FILENAME), timeout=LOCK_TIMEOUT)


def load_state(data_dir: str) -> Optional[BracketStateManager]:
    """Load the saved bracket, or None if there is none (or it is unreadable)."""
    path = state_path(data_dir)
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return None
    if not data:
        return None
    try:
        return BracketStateManager.from_dict(data)
    except (AttributeError, KeyError, TypeError, BracketError) as e:
        logger.warning(f'Failed to load bracket from {path}: {e!r}')
        return None


def save_state(manager: BracketStateManager, data_dir: str):
    """Save bracket state to YAML file."""
    os.makedirs(data_dir, exist_ok=True)
    with open(state_path(data_dir), 'w', encoding='utf-8') as f:
        yaml.dump(manager.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)


def bracket_rows(manager: BracketStateManager) -> List[Dict]:
    """
    One row per match, in the shape a relational store keeps them:
    bracket id, round name and index, match id and index, the two team
    references (None while unfilled), the winning slot and schedule data.
    """
    rows = []
    for round_index, round_ in enumerate(manager.rounds):
        for match in round_.matches:
            team_a, team_b = match.teams
            rows.append({
                'bracket_id': manager.bracket_id,
                'round_name': round_.name,
                'round_index': round_index,
                'match_id': match.id,
                'match_index': match.match_index,
                'team_a_id': team_a.id if team_a is not None else None,
                'team_b_id': team_b.id if team_b is not None else None,
                'team_a_score': team_a.score if team_a is not None else None,
                'team_b_score': team_b.score if team_b is not None else None,
                'winner_index': match.winner_index,
                'start_time': match.start_time,
                'court': match.court,
            })
    return rows
