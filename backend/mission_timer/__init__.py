import os

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from mission_timer.config import BACKEND_ROOT, Config, DATA_DIR

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    origins = [o.strip() for o in (raw or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))

    if flask_app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
        os.makedirs(DATA_DIR, exist_ok=True)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db, directory=os.path.join(BACKEND_ROOT, 'migrations'), render_as_batch=True)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from mission_timer.routes import main
    flask_app.register_blueprint(main)

    from mission_timer.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from mission_timer.api.interrupts import interrupts
    flask_app.register_blueprint(interrupts, url_prefix='/api')

    from mission_timer.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # Tables are created on boot so a fresh checkout works without running migrations
    from mission_timer import models  # noqa: F401
    with flask_app.app_context():
        db.create_all()

    @click.command('leaderboard-reset')
    def leaderboard_reset_command():
        """Removes every leaderboard entry."""
        from mission_timer.services.leaderboard import reset_entries
        with flask_app.app_context():
            removed = reset_entries()
            print(f'Leaderboard has been reset! ({removed} entries removed)')

    flask_app.cli.add_command(leaderboard_reset_command)

    return flask_app


def start_sensor_bridge(flask_app):
    """Start the serial sensor bridge if SERIAL_PORT is configured.

    Call this once, from the process that serves Socket.IO clients.
    """
    port = flask_app.config.get('SERIAL_PORT')
    if not port:
        flask_app.logger.warning('SERIAL_PORT not set. Set env SERIAL_PORT=COM3 to enable the sensor bridge.')
        return None
    from mission_timer.services.serial_bridge import SerialBridge
    bridge = SerialBridge(flask_app, port, flask_app.config.get('SERIAL_BAUD_RATE', 9600))
    bridge.start()
    return bridge
