"""Casino domain services: rooms, rewards and timers.

This package holds the game mechanics that socket handlers and HTTP routes
call into, keeping transport concerns out of the room and reward logic.
"""

from .janitor import Janitor
from .rewards import RandomSymbolSource, SequenceSymbolSource, evaluate
from .scheduler import SpinRevealScheduler
from .store import (
    CasinoError,
    InsufficientBalance,
    PlayerNotInRoom,
    RoomFull,
    RoomNotFound,
    RoomStore,
)


class Casino:
    """Per-application bundle of the room store and its collaborators."""

    def __init__(self, store: RoomStore, reveals: SpinRevealScheduler, janitor: Janitor, symbols, started_at: float):
        self.store = store
        self.reveals = reveals
        self.janitor = janitor
        self.symbols = symbols
        self.started_at = started_at
