import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Match history only; live game state is in memory
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RECORD_HISTORY = os.environ.get('RECORD_HISTORY', '1') not in ('0', 'false', 'False')
    # Game policy
    INITIAL_COINS = int(os.environ.get('INITIAL_COINS', '5'))
    HEARTBEAT_INTERVAL_MS = int(os.environ.get('HEARTBEAT_INTERVAL_MS', '10000'))
    DISCONNECT_TIMEOUT_MS = int(os.environ.get('DISCONNECT_TIMEOUT_MS', '30000'))
    FLIP_COOLDOWN_MS = int(os.environ.get('FLIP_COOLDOWN_MS', '2000'))
    # Timeout sweep cadence (seconds)
    SWEEP_INTERVAL_SEC = float(os.environ.get('SWEEP_INTERVAL_SEC', '1'))
    # Optional: heartbeat interval for sweep worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
