from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def get_coordinator():
    """SessionCoordinator bound to the current app."""
    return current_app.extensions['coinflip']


def create_app(config_class=Config, notifier=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Game core: one coordinator per app instance
    from coinflip.services.games import SessionCoordinator
    from coinflip.services.games.events import SocketIONotifier
    from coinflip.services.games.history import MatchHistory

    history = MatchHistory(flask_app) if flask_app.config.get('RECORD_HISTORY') else None
    coordinator = SessionCoordinator.from_config(
        flask_app.config,
        notifier or SocketIONotifier(socketio, namespace='/ws'),
        logger=flask_app.logger,
        history=history,
    )
    flask_app.extensions['coinflip'] = coordinator
    flask_app.extensions['coinflip_sockets'] = {}

    # Import and register blueprints here
    from coinflip.main import main
    flask_app.register_blueprint(main)

    from coinflip.api.games import games
    # Mount game routes under /api/game to match the browser client
    flask_app.register_blueprint(games, url_prefix='/api/game')

    # Register Socket.IO event handlers
    from coinflip.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    with flask_app.app_context():
        import coinflip.models  # noqa: F401
        db.create_all()

    from coinflip.services.games.scheduler import start_timeout_sweep
    start_timeout_sweep(flask_app, socketio, coordinator)

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the match history tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Match history has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
