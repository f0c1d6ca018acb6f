"""
Flask JSON API for Bracket Engine.

Each request loads the saved bracket, applies one operation and saves it
again while holding the data directory's file lock, so concurrent requests
never work from a stale copy.
"""
import os
from filelock import Timeout
from flask import Flask, jsonify, request
from core.errors import BracketError, MatchNotFound, TeamNotFound
from core.models import Team
from core.state import BracketStateManager
from store import bracket_rows, get_lock, load_state, save_state

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))


def _log_change(change):
    app.logger.debug(f"{change['type']} on {change.get('match_id') or change['bracket_id']}: {change}")


def _load_manager() -> BracketStateManager:
    manager = load_state(DATA_DIR)
    if manager is None:
        manager = BracketStateManager()
    manager.subscribe(_log_change)
    return manager


def _mutate(operation):
    """Run operation(manager) against the saved bracket and save the result."""
    with get_lock(DATA_DIR):
        manager = _load_manager()
        result = operation(manager)
        save_state(manager, DATA_DIR)
    return manager, result


def _bracket_payload(manager: BracketStateManager, **extra):
    champion = manager.champion
    return jsonify({
        'success': True,
        'bracket': manager.to_dict(),
        'champion': champion.to_dict() if champion else None,
        **extra,
    })


@app.errorhandler(BracketError)
def handle_bracket_error(e):
    status = 404 if isinstance(e, (MatchNotFound, TeamNotFound)) else 400
    app.logger.info(f'Rejected bracket operation: {e}')
    return jsonify({'success': False, 'error': str(e)}), status


@app.errorhandler(Timeout)
def handle_lock_timeout(e):
    app.logger.warning(f'Bracket data is locked: {e}')
    return jsonify({'success': False, 'error': 'Bracket is busy, try again.'}), 503


@app.route('/api/bracket', methods=['GET'])
def api_bracket():
    """Current rounds, teams and settings."""
    return _bracket_payload(_load_manager())


@app.route('/api/bracket/rows', methods=['GET'])
def api_bracket_rows():
    """Flattened match rows for external synchronisation."""
    return jsonify({'success': True, 'rows': bracket_rows(_load_manager())})


@app.route('/api/matches/<match_id>/winner', methods=['POST'])
def api_set_winner(match_id):
    data = request.get_json(silent=True) or {}
    if 'winner_index' not in data:
        return jsonify({'success': False, 'error': 'winner_index required'}), 400
    manager, _ = _mutate(lambda m: m.set_winner(match_id, data['winner_index']))
    return _bracket_payload(manager)


@app.route('/api/matches/<match_id>/score', methods=['POST'])
def api_set_score(match_id):
    data = request.get_json(silent=True) or {}
    if 'team_index' not in data:
        return jsonify({'success': False, 'error': 'team_index required'}), 400
    manager, _ = _mutate(lambda m: m.set_team_score(match_id, data['team_index'], data.get('score')))
    return _bracket_payload(manager)


@app.route('/api/matches/<match_id>/team', methods=['POST'])
def api_set_match_team(match_id):
    data = request.get_json(silent=True) or {}
    if 'team_index' not in data:
        return jsonify({'success': False, 'error': 'team_index required'}), 400
    manager, _ = _mutate(lambda m: m.set_match_team(match_id, data['team_index'], data.get('team_id')))
    return _bracket_payload(manager)


@app.route('/api/matches/<match_id>/details', methods=['POST'])
def api_update_match_details(match_id):
    data = request.get_json(silent=True) or {}
    manager, _ = _mutate(lambda m: m.update_match_details(
        match_id,
        start_time=data.get('start_time'),
        court=data.get('court'),
        details=data.get('details'),
    ))
    return _bracket_payload(manager)


@app.route('/api/settings', methods=['POST'])
def api_update_settings():
    """Merge settings. Changing num_teams or bracket_type rebuilds the bracket."""
    data = request.get_json(silent=True) or {}
    try:
        manager, regenerated = _mutate(lambda m: m.set_settings(**data))
    except BracketError:
        raise
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    return _bracket_payload(manager, regenerated=regenerated)


@app.route('/api/teams', methods=['POST'])
def api_add_team():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'success': False, 'error': 'Team name required'}), 400
    team = Team(name=name, id=data.get('id'), attributes=data.get('attributes'))
    manager, _ = _mutate(lambda m: m.add_team(team))
    return _bracket_payload(manager)


@app.route('/api/teams/<team_id>', methods=['POST'])
def api_update_team(team_id):
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    manager, _ = _mutate(lambda m: m.update_team(
        team_id,
        name=name.strip() if name else None,
        attributes=data.get('attributes'),
    ))
    return _bracket_payload(manager)


@app.route('/api/teams/<team_id>', methods=['DELETE'])
def api_remove_team(team_id):
    manager, _ = _mutate(lambda m: m.remove_team(team_id))
    return _bracket_payload(manager)


@app.route('/api/bracket/regenerate', methods=['POST'])
def api_regenerate():
    """Rebuild the bracket from the current roster. Discards all results."""
    manager, _ = _mutate(lambda m: m.regenerate())
    return _bracket_payload(manager)


@app.route('/api/bracket/reset', methods=['POST'])
def api_reset():
    """Start over with default teams. Discards the whole bracket."""
    manager, _ = _mutate(lambda m: m.reset_bracket())
    return _bracket_payload(manager)


if __name__ == '__main__':
    app.run(debug=True)
