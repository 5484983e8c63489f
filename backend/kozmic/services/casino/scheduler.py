import threading
from typing import Set, Tuple

from .store import RoomStore, SpinOutcome


class SpinRevealScheduler:
    """Deferred spinResult/updateLeaderboard broadcasts.

    Each pending reveal is keyed by (room, player, spin id). Removing a room
    cancels its pending reveals; a worker whose key is gone does not emit.
    """

    def __init__(self, socketio, store: RoomStore, namespace: str = '/'):
        self._socketio = socketio
        self._store = store
        self._namespace = namespace
        self._pending: Set[Tuple[str, str, int]] = set()
        self._lock = threading.Lock()

    def pending(self) -> Set[Tuple[str, str, int]]:
        with self._lock:
            return set(self._pending)

    def cancel_room(self, room_code: str) -> int:
        with self._lock:
            doomed = {key for key in self._pending if key[0] == room_code}
            self._pending -= doomed
        return len(doomed)

    def schedule(self, app, outcome: SpinOutcome, delay: float) -> Tuple[str, str, int]:
        """Reveal `outcome` to its room after `delay` seconds.

        - Runs inline in TESTING unless ENABLE_SCHEDULER_IN_TESTS is set
        - The leaderboard is read when the reveal fires, not when it was scheduled
        """
        key = (outcome.room_code, outcome.player.id, outcome.spin_id)
        payload = outcome.to_dict()
        with self._lock:
            self._pending.add(key)
        app.logger.debug(f"[reveal-set] room={key[0]} player={key[1]} spin={key[2]} delay={delay}s")

        def _worker(reveal_key: Tuple[str, str, int], data: dict, wait: float):
            if wait > 0:
                self._socketio.sleep(wait)
            with self._lock:
                if reveal_key not in self._pending:
                    app.logger.info(f"[reveal-abort] room={reveal_key[0]} spin={reveal_key[2]} room gone")
                    return
                self._pending.discard(reveal_key)
            code = reveal_key[0]
            self._socketio.emit('spinResult', data, to=code, namespace=self._namespace)
            self._socketio.emit('updateLeaderboard', self._store.leaderboard(code), to=code, namespace=self._namespace)
            app.logger.debug(f"[reveal-fire] room={code} player={reveal_key[1]} spin={reveal_key[2]}")

        if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
            _worker(key, payload, delay)
        else:
            self._socketio.start_background_task(_worker, key, payload, delay)
        return key
