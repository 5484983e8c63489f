import os
import time

from flask import Blueprint, current_app, jsonify, send_from_directory, abort

main = Blueprint('main', __name__)


def _static_dir():
    return current_app.config.get('STATIC_DIR')


@main.route('/')
def index():
    static_dir = _static_dir()
    if static_dir and os.path.isfile(os.path.join(static_dir, 'index.html')):
        return send_from_directory(static_dir, 'index.html')
    return jsonify({'message': 'Welcome to the Monster Kozmic Casino server!'})


@main.route('/health')
def health():
    casino = current_app.extensions['kozmic']
    return jsonify({
        'status': 'OK',
        'uptime': round(time.monotonic() - casino.started_at, 3),
        'rooms': casino.store.room_count(),
        'totalPlayers': casino.store.player_count(),
    })


@main.route('/<path:filename>')
def static_asset(filename):
    static_dir = _static_dir()
    if not static_dir or not os.path.isdir(static_dir):
        abort(404)
    return send_from_directory(static_dir, filename)
