from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One explicitly owned session per application
    from showdown.services.games import RoundClock, TriviaSession
    from showdown.socketio_events import deliver, register_socketio_handlers

    cfg = flask_app.config
    clock = RoundClock(
        default_duration=cfg.get('ROUND_DURATION_SEC', 60),
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
        heartbeat_sec=cfg.get('CLOCK_HEARTBEAT_SEC', 0),
    )
    flask_app.extensions['trivia_session'] = TriviaSession(
        clock=clock,
        publish=lambda events: deliver(events, namespace),
        min_players=cfg.get('MIN_PLAYERS', 3),
        max_attempts=cfg.get('MAX_ATTEMPTS', 3),
        round_duration=cfg.get('ROUND_DURATION_SEC', 60),
        correct_points=cfg.get('CORRECT_ANSWER_POINTS', 10),
        rotate_master_on_round_end=cfg.get('ROTATE_MASTER_ON_ROUND_END', False),
    )

    # Import and register blueprints here
    from showdown.main import main
    flask_app.register_blueprint(main)

    from showdown.api.session import session_api
    flask_app.register_blueprint(session_api, url_prefix='/api/session')

    # Register Socket.IO event handlers
    register_socketio_handlers(namespace=namespace)
    flask_app.logger.info(f"[startup] namespace={namespace} round={cfg.get('ROUND_DURATION_SEC')}s min_players={cfg.get('MIN_PLAYERS')}")

    return flask_app
