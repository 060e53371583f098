from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the coin flip server!'})


@main.route('/config')
def client_config():
    # Timing values the browser client needs for heartbeats and countdowns
    cfg = current_app.config
    return jsonify({
        'heartbeatInterval': int(cfg.get('HEARTBEAT_INTERVAL_MS', 10000)),
        'disconnectTimeout': int(cfg.get('DISCONNECT_TIMEOUT_MS', 30000)),
        'flipCooldown': int(cfg.get('FLIP_COOLDOWN_MS', 2000)),
        'initialCoins': int(cfg.get('INITIAL_COINS', 5)),
    })
