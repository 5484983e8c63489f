import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Permitted cross-origin source for HTTP and Socket.IO
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', '*')
    STATIC_DIR = os.environ.get('STATIC_DIR') or os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'static')
    # Room and wallet rules
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '8'))
    SPIN_COST = int(os.environ.get('SPIN_COST', '50'))
    STARTING_CTOK = int(os.environ.get('STARTING_CTOK', '1000'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Delay before spin results are revealed to the room (seconds)
    SPIN_REVEAL_DELAY_SEC = float(os.environ.get('SPIN_REVEAL_DELAY_SEC', '1.0'))
    # Empty rooms older than this are swept by the janitor (seconds)
    ROOM_MAX_AGE_SEC = int(os.environ.get('ROOM_MAX_AGE_SEC', str(2 * 60 * 60)))
    JANITOR_INTERVAL_SEC = int(os.environ.get('JANITOR_INTERVAL_SEC', str(60 * 60)))
