"""In-memory room store.

One store is built per application and handed to every handler. All room,
player and connection-index mutations happen under a single lock, so each
public method is atomic relative to the others.
"""

import itertools
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from kozmic.models import Player, Room, generate_room_code
from . import leaderboard
from .rewards import enlightenment_gain, evaluate


class CasinoError(Exception):
    """Recoverable, caller-facing rejection of an action."""

    message = 'Request rejected'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class RoomNotFound(CasinoError):
    message = 'Room not found'


class RoomFull(CasinoError):
    message = 'Room full'


class PlayerNotInRoom(CasinoError):
    message = 'Player not in room'


class InsufficientBalance(CasinoError):
    message = 'Insufficient CTOK'


class SpinOutcome:
    def __init__(self, spin_id: int, room_code: str, player: Player, results, reward: int, message: str):
        self.spin_id = spin_id
        self.room_code = room_code
        self.player = player
        self.results = list(results)
        self.reward = reward
        self.message = message

    def to_dict(self):
        return {
            'playerId': self.player.id,
            'results': self.results,
            'reward': self.reward,
            'message': self.message,
        }


class Seating:
    """Result of a join: the seat, plus any departure from a previous room."""

    def __init__(self, room: Room, player: Player, departure: Optional['Departure'] = None, rejoined: bool = False):
        self.room = room
        self.player = player
        self.departure = departure
        self.rejoined = rejoined


class Departure:
    """A player removed from a room, and whether the room went with them."""

    def __init__(self, room_code: str, player: Player, room_removed: bool):
        self.room_code = room_code
        self.player = player
        self.room_removed = room_removed


def normalize_code(room_code) -> Optional[str]:
    if not isinstance(room_code, str):
        return None
    code = room_code.strip().upper()
    return code or None


class RoomStore:
    def __init__(self, max_players: int = 8, starting_ctok: int = 1000, spin_cost: int = 50,
                 code_length: int = 6, clock: Callable[[], float] = time.time):
        self.max_players = max_players
        self.starting_ctok = starting_ctok
        self.spin_cost = spin_cost
        self.code_length = code_length
        self._clock = clock
        self._rooms: Dict[str, Room] = {}
        # connection id -> room code; a connection sits in at most one room
        self._seats: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._spin_ids = itertools.count(1)
        self._removal_listeners: List[Callable[[str], None]] = []

    def add_removal_listener(self, listener: Callable[[str], None]) -> None:
        """Call `listener(room_code)` whenever a room is deleted."""
        self._removal_listeners.append(listener)

    # ---- lookups ----

    def _require_room(self, room_code) -> Room:
        code = normalize_code(room_code)
        room = self._rooms.get(code) if code else None
        if room is None:
            raise RoomNotFound()
        return room

    def get_room(self, room_code) -> Room:
        with self._lock:
            return self._require_room(room_code)

    def room_of(self, player_id: str) -> Optional[str]:
        with self._lock:
            return self._seats.get(player_id)

    def leaderboard(self, room_code) -> List[Dict]:
        with self._lock:
            room = self._rooms.get(normalize_code(room_code) or '')
            if room is None:
                return []
            return leaderboard.project(room.players)

    def roster(self, room_code) -> List[Dict]:
        with self._lock:
            return [p.to_dict() for p in self._require_room(room_code).players]

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def player_count(self) -> int:
        with self._lock:
            return sum(len(r.players) for r in self._rooms.values())

    def __contains__(self, room_code) -> bool:
        with self._lock:
            return normalize_code(room_code) in self._rooms

    # ---- lifecycle ----

    def create_room(self) -> Room:
        with self._lock:
            code = generate_room_code(self.code_length, taken=self._rooms)
            room = Room(code, created_at=self._clock())
            self._rooms[code] = room
            return room

    def join_room(self, room_code, player_id: str, name: Optional[str]) -> Seating:
        """Seat a connection in a room.

        A connection already seated elsewhere is moved, and the departure from
        its previous room is reported so the caller can announce it. Joining
        the room it already sits in returns the existing seat, marked `rejoined`.
        """
        with self._lock:
            room = self._require_room(room_code)
            current = self._seats.get(player_id)
            if current == room.code:
                return Seating(room, room.find_player(player_id), rejoined=True)
            if len(room.players) >= self.max_players:
                raise RoomFull()
            departure = self._leave(player_id) if current else None
            player = Player(player_id, name, ctok=self.starting_ctok, joined_at=self._clock())
            room.players.append(player)
            self._seats[player_id] = room.code
            return Seating(room, player, departure)

    def leave(self, player_id: str) -> Optional[Departure]:
        """Remove a connection from its room, deleting the room if now empty."""
        with self._lock:
            return self._leave(player_id)

    def leave_room(self, room_code, player_id: str) -> Departure:
        """Explicit leave; the connection must be seated in `room_code`."""
        with self._lock:
            room = self._require_room(room_code)
            self._seated_player(room, player_id)
            return self._leave(player_id)

    def _leave(self, player_id: str) -> Optional[Departure]:
        code = self._seats.pop(player_id, None)
        room = self._rooms.get(code) if code else None
        if room is None:
            return None
        player = room.remove_player(player_id)
        if player is None:
            return None
        removed = room.is_empty and self._remove_room(code)
        return Departure(code, player, removed)

    def _remove_room(self, code: str) -> bool:
        room = self._rooms.pop(code, None)
        if room is None:
            return False
        for p in room.players:
            self._seats.pop(p.id, None)
        for listener in self._removal_listeners:
            listener(code)
        return True

    def remove_room(self, room_code) -> bool:
        """Delete a room if it exists; returns False when it was already gone."""
        with self._lock:
            code = normalize_code(room_code)
            return bool(code) and self._remove_room(code)

    def sweep_empty(self, max_age_sec: float, now: Optional[float] = None) -> List[str]:
        """Delete rooms with no players created more than `max_age_sec` ago."""
        with self._lock:
            now = self._clock() if now is None else now
            stale = [
                code for code, room in self._rooms.items()
                if room.is_empty and (now - room.created_at) > max_age_sec
            ]
            return [code for code in stale if self._remove_room(code)]

    # ---- actions ----

    def _seated_player(self, room: Room, player_id: str) -> Player:
        player = room.find_player(player_id)
        if player is None:
            raise PlayerNotInRoom()
        return player

    def spin(self, room_code, player_id: str, symbols) -> SpinOutcome:
        """Charge the spin cost, draw from `symbols` and pay out the reward.

        The balance check and the draw both happen before the wallet is
        touched, so a rejected spin leaves the player unchanged.
        """
        with self._lock:
            room = self._require_room(room_code)
            player = self._seated_player(room, player_id)
            if player.ctok < self.spin_cost:
                raise InsufficientBalance()
            results = symbols.draw()
            reward, message = evaluate(results)
            player.ctok -= self.spin_cost
            player.ctok += reward
            player.enlightenment += enlightenment_gain(results)
            return SpinOutcome(next(self._spin_ids), room.code, player, results, reward, message)

    def take_shot(self, room_code, player_id: str) -> Tuple[Room, Player]:
        with self._lock:
            room = self._require_room(room_code)
            player = self._seated_player(room, player_id)
            player.shots += 1
            room.game_state.shots += 1
            return room, player

    def trigger_event(self, room_code, event_type) -> Room:
        with self._lock:
            room = self._require_room(room_code)
            room.game_state.current_event = event_type
            return room
