from typing import List

from .store import RoomStore


class Janitor:
    """Hourly backstop that deletes empty rooms past their retention age.

    Rooms normally vanish when their last player leaves; this catches any
    that became empty some other way. Rooms with players are never touched.
    """

    def __init__(self, store: RoomStore, max_age_sec: float = 2 * 60 * 60, interval_sec: float = 60 * 60):
        self.store = store
        self.max_age_sec = max_age_sec
        self.interval_sec = interval_sec
        self._running = False

    def sweep(self, app=None, now: float = None) -> List[str]:
        removed = self.store.sweep_empty(self.max_age_sec, now=now)
        if app is not None:
            for code in removed:
                app.logger.info(f"[janitor] removed stale empty room={code}")
        return removed

    def run_forever(self, app, socketio) -> None:
        self._running = True
        app.logger.info(f"[janitor] started interval={self.interval_sec}s max_age={self.max_age_sec}s")
        while self._running:
            socketio.sleep(self.interval_sec)
            if not self._running:
                break
            try:
                self.sweep(app)
            except Exception:
                # Keep the loop alive; the next interval retries
                app.logger.exception("[janitor] sweep failed")

    def start(self, app, socketio):
        return socketio.start_background_task(self.run_forever, app, socketio)

    def stop(self) -> None:
        self._running = False
