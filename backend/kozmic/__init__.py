import time

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from kozmic.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, symbol_source=None, clock=time.time):
    flask_app = Flask(__name__, static_folder=None)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGIN', '*')
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One room store per application; tests get a fresh one per app
    from kozmic.services.casino import Casino, Janitor, RandomSymbolSource, RoomStore, SpinRevealScheduler
    store = RoomStore(
        max_players=flask_app.config.get('MAX_PLAYERS', 8),
        starting_ctok=flask_app.config.get('STARTING_CTOK', 1000),
        spin_cost=flask_app.config.get('SPIN_COST', 50),
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6),
        clock=clock,
    )
    reveals = SpinRevealScheduler(socketio, store)
    store.add_removal_listener(reveals.cancel_room)
    janitor = Janitor(
        store,
        max_age_sec=flask_app.config.get('ROOM_MAX_AGE_SEC', 2 * 60 * 60),
        interval_sec=flask_app.config.get('JANITOR_INTERVAL_SEC', 60 * 60),
    )
    flask_app.extensions['kozmic'] = Casino(
        store=store,
        reveals=reveals,
        janitor=janitor,
        symbols=symbol_source or RandomSymbolSource(),
        started_at=time.monotonic(),
    )

    from kozmic.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from kozmic.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    if not flask_app.config.get('TESTING'):
        janitor.start(flask_app, socketio)

    return flask_app
