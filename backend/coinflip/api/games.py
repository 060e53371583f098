from flask import Blueprint, jsonify, request, current_app
from coinflip import get_coordinator
from coinflip.services.games import WAITING, GameError


games = Blueprint('games', __name__)


class BadRequest(GameError):
    code = 'bad_request'
    message = 'Bad request'


@games.errorhandler(GameError)
def handle_game_error(err):
    return jsonify(err.to_dict()), err.status_code


def _require(data, *fields):
    missing = [f for f in fields if data.get(f) in (None, '')]
    if missing:
        raise BadRequest(f"{', '.join(missing)} required")
    return [data[f] for f in fields]


def _body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@games.route('/login', methods=['POST'])
def login():
    (student_id,) = _require(_body(), 'studentId')
    player = get_coordinator().login(str(student_id))
    return jsonify(player.to_dict())


@games.route('/match', methods=['POST'])
def request_match():
    (player_id,) = _require(_body(), 'playerId')
    outcome = get_coordinator().request_match(str(player_id))
    if outcome is WAITING:
        return jsonify(WAITING.to_dict())
    return jsonify(outcome.to_dict())


@games.route('/bet', methods=['POST'])
def place_bet():
    game_id, player_id, amount = _require(_body(), 'gameId', 'playerId', 'amount')
    if isinstance(amount, str) and amount.strip().lstrip('-').isdigit():
        amount = int(amount)
    # no silent truncation of fractional amounts
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise BadRequest('amount must be an integer')
    get_coordinator().bet(str(game_id), str(player_id), amount)
    return jsonify({'success': True})


@games.route('/flip', methods=['POST'])
def flip():
    game_id, player_id = _require(_body(), 'gameId', 'playerId')
    get_coordinator().flip(str(game_id), str(player_id))
    # Outcome is delivered to both players through the flip-result event
    return jsonify({'success': True})


@games.route('/heartbeat', methods=['POST'])
def heartbeat():
    (player_id,) = _require(_body(), 'playerId')
    player = get_coordinator().heartbeat(str(player_id))
    return jsonify(player.to_dict())


@games.route('/players/<string:player_id>', methods=['GET'])
def get_player(player_id):
    return jsonify(get_coordinator().get_player(player_id).to_dict())


@games.route('/history', methods=['GET'])
def get_history():
    """
    Returns recently finished matches, optionally for one player.
    """
    if not current_app.config.get('RECORD_HISTORY'):
        return jsonify([])
    from coinflip.services.games.history import recent_results
    player_id = request.args.get('playerId')
    try:
        limit = min(200, max(1, int(request.args.get('limit', 50))))
    except ValueError:
        limit = 50
    return jsonify([r.to_dict() for r in recent_results(player_id, limit=limit)])


@games.route('/<string:game_id>', methods=['GET'])
def get_game_state(game_id):
    payload = get_coordinator().get_session(game_id).to_dict()
    payload['durations'] = {
        'flipCooldown': int(current_app.config.get('FLIP_COOLDOWN_MS', 2000)),
        'disconnectTimeout': int(current_app.config.get('DISCONNECT_TIMEOUT_MS', 30000)),
    }
    return jsonify(payload)
