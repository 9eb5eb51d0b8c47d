from flask import Blueprint, jsonify, request, current_app, abort
from dicegame import games_store, socketio
from dicegame.models import HigherLowerGame, RoundNotReady
from dicegame.services.games.scoring import Prediction
import time
from typing import Optional, Tuple


games = Blueprint('games', __name__)

_last_controller_action: dict[str, float] = {}


def _get_game_or_404(game_code: str) -> HigherLowerGame:
    game = games_store.get(game_code)
    if game is None:
        abort(404)
    return game


def _emit_state_update(game_code: str) -> None:
    socketio.emit('state_update', {'game_code': game_code}, to=f"game:{game_code}", namespace='/ws')


def _debounced(action: str, game_code: str) -> bool:
    try:
        debounce_ms = int(current_app.config.get('CONTROLLER_DEBOUNCE_MS', 0))
    except (TypeError, ValueError):
        debounce_ms = 0
    if debounce_ms <= 0:
        return False
    key = f"{action}:{game_code}"
    now = time.time() * 1000.0
    last = _last_controller_action.get(key, 0)
    if now - last < debounce_ms:
        return True
    _last_controller_action[key] = now
    return False


def _parse_amount(raw) -> Tuple[Optional[int], Optional[str]]:
    """Turn the submitted bet field into an int, or an error message."""
    if isinstance(raw, bool):
        return None, 'Enter a valid number.'
    if isinstance(raw, int):
        return raw, None
    if raw is None or str(raw).strip() == '':
        return None, 'Enter a bet.'
    try:
        return int(str(raw).strip(), 10), None
    except ValueError:
        return None, 'Enter a valid number.'


def _json_object():
    """Return the request body as a dict, or None when it is not a JSON object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _bad_body():
    return jsonify({'error': 'Request body must be a JSON object'}), 400


def _apply_bet(game: HigherLowerGame, data: dict):
    """Validate and store a bet from a request body; returns an error response or None."""
    # A missing amount keeps the last bet, like a missing prediction
    amount, error = _parse_amount(data['amount'] if 'amount' in data else game.last_bet)
    if error:
        return jsonify({'error': 'InvalidAmount', 'message': error}), 400
    try:
        prediction = Prediction.parse(data.get('prediction') or game.last_prediction)
    except ValueError:
        return jsonify({'error': 'InvalidPrediction', 'message': 'Choose higher or lower.'}), 400
    result = game.place_bet(amount, prediction)
    if not result:
        return jsonify({'error': result.error.value, 'message': result.message}), 400
    return None


@games.route('/create', methods=['POST'])
def create_game():
    code, game = games_store.create()
    current_app.logger.info(f"[create] game={code} balance={game.balance}")
    return jsonify({
        'message': 'New game created!',
        'game_code': code,
        'state': game.to_dict(),
    }), 201


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    game = _get_game_or_404(game_code)
    payload = game.to_dict()
    payload['game_code'] = game_code.upper()
    return jsonify(payload)


@games.route('/<string:game_code>/dealer/roll', methods=['POST'])
def roll_dealer(game_code):
    code = game_code.upper()
    game = _get_game_or_404(code)
    if _debounced('dealer', code):
        return jsonify({'message': 'debounced'}), 202
    if game.is_game_over():
        return jsonify({'error': 'Game over - balance is empty!'}), 400

    roll = game.roll_dealer()
    current_app.logger.info(f"[dealer_roll] game={code} dice={roll.dealer_dice} total={roll.dealer_total}")
    _emit_state_update(code)
    payload = roll.to_dict()
    payload['state'] = game.to_dict()
    return jsonify(payload)


@games.route('/<string:game_code>/bet', methods=['POST'])
def place_bet(game_code):
    code = game_code.upper()
    game = _get_game_or_404(code)
    if game.is_game_over():
        return jsonify({'error': 'Game over - balance is empty!'}), 400
    data = _json_object()
    if data is None:
        return _bad_body()
    failed = _apply_bet(game, data)
    if failed:
        current_app.logger.info(f"[bet] game={code} rejected amount={data.get('amount')!r}")
        return failed
    current_app.logger.info(f"[bet] game={code} amount={game.last_bet} prediction={game.last_prediction.value}")
    _emit_state_update(code)
    return jsonify({'ok': True, 'state': game.to_dict()})


@games.route('/<string:game_code>/player/roll', methods=['POST'])
def roll_player(game_code):
    code = game_code.upper()
    game = _get_game_or_404(code)
    if _debounced('player', code):
        return jsonify({'message': 'debounced'}), 202
    if game.is_game_over():
        return jsonify({'error': 'Game over - balance is empty!'}), 400
    if not game.has_dealer_rolled():
        return jsonify({'error': 'The dealer must roll first.'}), 400

    data = _json_object()
    if data is None:
        return _bad_body()
    if 'amount' in data or 'prediction' in data:
        failed = _apply_bet(game, data)
        if failed:
            return failed

    try:
        record = game.resolve_round()
    except RoundNotReady as exc:
        return jsonify({'error': str(exc)}), 400
    current_app.logger.info(
        f"[resolve] game={code} round={record.round_number} dealer={record.dealer_total} "
        f"player={record.player_total} {record.result.value} balance={record.balance_after}"
    )
    _emit_state_update(code)
    return jsonify({'round': record.to_dict(), 'state': game.to_dict()})


@games.route('/<string:game_code>/reset', methods=['POST'])
def reset_game(game_code):
    code = game_code.upper()
    game = _get_game_or_404(code)
    game.reset()
    current_app.logger.info(f"[reset] game={code}")
    _emit_state_update(code)
    return jsonify(game.to_dict())


def end_game(game_code: str) -> bool:
    """Drop a game and its controller bookkeeping, and tell the room it ended."""
    code = game_code.upper()
    removed = games_store.remove(code)
    for key in [k for k in _last_controller_action if k.endswith(f":{code}")]:
        _last_controller_action.pop(key, None)
    if removed is None:
        return False
    socketio.emit('session_ended', {'game_code': code}, to=f"game:{code}", namespace='/ws')
    return True


@games.route('/<string:game_code>', methods=['DELETE'])
def delete_game(game_code):
    code = game_code.upper()
    if not end_game(code):
        abort(404)
    current_app.logger.info(f"[end] game={code}")
    return jsonify({'message': 'Game ended', 'game_code': code})
