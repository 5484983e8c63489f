import string
import random
import time
from typing import Container, List, Optional

DEFAULT_PLAYER_NAME = 'Anonymous Astronaut'
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


class Player:
    def __init__(self, id: str, name: Optional[str], ctok: int, joined_at: Optional[float] = None):
        self.id = id
        self.name = name or DEFAULT_PLAYER_NAME
        self.ctok = ctok
        self.enlightenment = 0
        self.shots = 0
        self.joined_at = joined_at if joined_at is not None else time.time()

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'ctok': self.ctok,
            'enlightenment': self.enlightenment,
            'shots': self.shots,
            'joinedAt': int(self.joined_at * 1000),
        }


class GameState:
    def __init__(self, created_at: float):
        self.current_event: Optional[str] = None
        self.shots = 0
        self.created_at = created_at

    def to_dict(self):
        return {
            'currentEvent': self.current_event,
            'shots': self.shots,
            'createdAt': int(self.created_at * 1000),
        }


class Room:
    def __init__(self, code: str, created_at: float):
        self.code = code
        self.players: List[Player] = []
        self.game_state = GameState(created_at)

    @property
    def created_at(self) -> float:
        return self.game_state.created_at

    @property
    def is_empty(self) -> bool:
        return not self.players

    def find_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.find_player(player_id)
        if player is not None:
            self.players.remove(player)
        return player

    def to_dict(self):
        return {
            'code': self.code,
            'players': [p.to_dict() for p in self.players],
            'gameState': self.game_state.to_dict(),
        }


_code_rng = random.SystemRandom()


def generate_room_code(length: int = 6, taken: Container[str] = (), rng: Optional[random.Random] = None) -> str:
    """Generate a short, uppercase alphanumeric room code not present in `taken`."""
    if length < 4:
        raise ValueError('room codes must be at least 4 characters')
    rng = rng or _code_rng
    while True:
        code = ''.join(rng.choices(ROOM_CODE_ALPHABET, k=length))
        if code not in taken:
            return code
