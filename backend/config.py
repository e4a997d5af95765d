import os


def _env_bool(name, default='0'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of browser origins allowed to talk to the server
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5000,http://127.0.0.1:5000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Round timer (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '60'))
    # Minimum players in the session before the master may start a round
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '3'))
    MAX_ATTEMPTS = int(os.environ.get('MAX_ATTEMPTS', '3'))
    CORRECT_ANSWER_POINTS = int(os.environ.get('CORRECT_ANSWER_POINTS', '10'))
    # Hand the master role to the next player after every resolved round
    ROTATE_MASTER_ON_ROUND_END = _env_bool('ROTATE_MASTER_ON_ROUND_END')
    # Optional: heartbeat interval for round clock logs (sec). 0 disables.
    CLOCK_HEARTBEAT_SEC = int(os.environ.get('CLOCK_HEARTBEAT_SEC', '0'))
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '5000'))
