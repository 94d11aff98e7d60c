from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

__version__ = '1.0.0'

socketio = SocketIO(async_mode=None)

ENGINE_KEY = 'numbergame'


def get_engine(flask_app):
    """Return the GameEngine owned by the given Flask app."""
    return flask_app.extensions[ENGINE_KEY]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One engine per app; timers run as Socket.IO background tasks
    from numbergame.services.games import GameEngine
    engine = GameEngine.from_config(
        flask_app.config,
        start_background_task=socketio.start_background_task,
        sleep=socketio.sleep,
    )
    flask_app.extensions[ENGINE_KEY] = engine

    from numbergame.main import main
    flask_app.register_blueprint(main)

    from numbergame.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from numbergame.socketio_events import register_socketio_handlers
    register_socketio_handlers(engine)

    flask_app.logger.info(
        f"[startup] grace={engine.scheduler.grace_period}s max_players={engine.registry.max_players}"
    )
    return flask_app
