from kozmic.services.casino import Janitor, RoomStore, SequenceSymbolSource, SpinRevealScheduler
from kozmic.services.casino.rewards import GUITAR, PIANO, STAR

TWO_HOURS = 2 * 60 * 60


class RecordingSocketIO:
    """Stands in for the Socket.IO server: records emits and parks tasks."""

    def __init__(self):
        self.emitted = []
        self.tasks = []
        self.slept = []

    def emit(self, event, data, to=None, namespace=None):
        self.emitted.append((event, data, to))

    def start_background_task(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        self.slept.append(seconds)

    def run_tasks(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)


def _spin(store, name='Ana'):
    room = store.create_room()
    store.join_room(room.code, f'sid-{name}', name)
    outcome = store.spin(room.code, f'sid-{name}', SequenceSymbolSource([[GUITAR, PIANO, STAR]]))
    return room, outcome


def test_janitor_removes_only_old_empty_rooms(clock):
    store = RoomStore(clock=clock)
    old_empty = store.create_room()
    old_busy = store.create_room()
    store.join_room(old_busy.code, 'sid-1', 'Ana')
    clock.advance(TWO_HOURS + 1)
    fresh_empty = store.create_room()

    removed = Janitor(store, max_age_sec=TWO_HOURS).sweep()

    assert removed == [old_empty.code]
    assert old_busy.code in store
    assert fresh_empty.code in store


def test_janitor_never_removes_occupied_rooms(clock):
    store = RoomStore(clock=clock)
    room = store.create_room()
    store.join_room(room.code, 'sid-1', 'Ana')
    clock.advance(TWO_HOURS * 50)
    assert Janitor(store, max_age_sec=TWO_HOURS).sweep() == []
    assert room.code in store


def test_janitor_exactly_at_threshold_keeps_room(clock):
    store = RoomStore(clock=clock)
    room = store.create_room()
    clock.advance(TWO_HOURS)
    assert Janitor(store, max_age_sec=TWO_HOURS).sweep() == []
    assert room.code in store


def test_janitor_loop_sweeps_each_interval(flask_app, clock):
    store = RoomStore(clock=clock)
    room = store.create_room()
    clock.advance(TWO_HOURS + 1)
    janitor = Janitor(store, max_age_sec=TWO_HOURS, interval_sec=3600)
    sio = RecordingSocketIO()

    def _sleep(seconds):
        sio.slept.append(seconds)
        if len(sio.slept) > 1:
            janitor.stop()

    sio.sleep = _sleep
    janitor.run_forever(flask_app, sio)

    assert sio.slept == [3600, 3600]
    assert room.code not in store


def test_reveal_runs_inline_in_tests(flask_app):
    store = RoomStore()
    sio = RecordingSocketIO()
    reveals = SpinRevealScheduler(sio, store)
    room, outcome = _spin(store)

    reveals.schedule(flask_app, outcome, 0)

    events = [e[0] for e in sio.emitted]
    assert events == ['spinResult', 'updateLeaderboard']
    assert sio.emitted[0][1] == outcome.to_dict()
    assert sio.emitted[1][2] == room.code
    assert reveals.pending() == set()


def test_reveal_waits_then_reads_current_leaderboard(flask_app):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    store = RoomStore()
    sio = RecordingSocketIO()
    reveals = SpinRevealScheduler(sio, store)
    room, outcome = _spin(store)

    key = reveals.schedule(flask_app, outcome, 1.0)
    assert key == (room.code, 'sid-Ana', outcome.spin_id)
    assert sio.emitted == []
    room.players[0].ctok = 12345
    sio.run_tasks()

    assert sio.slept == [1.0]
    board = {event: data for event, data, _ in sio.emitted}['updateLeaderboard']
    assert board[0]['ctok'] == 12345


def test_reveal_cancelled_when_room_removed(flask_app):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    store = RoomStore()
    sio = RecordingSocketIO()
    reveals = SpinRevealScheduler(sio, store)
    store.add_removal_listener(reveals.cancel_room)
    room, outcome = _spin(store)

    reveals.schedule(flask_app, outcome, 1.0)
    store.leave('sid-Ana')
    sio.run_tasks()

    assert room.code not in store
    assert sio.emitted == []
    assert reveals.pending() == set()


def test_reveal_survives_spinner_leaving_occupied_room(flask_app):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    store = RoomStore()
    sio = RecordingSocketIO()
    reveals = SpinRevealScheduler(sio, store)
    store.add_removal_listener(reveals.cancel_room)
    room, outcome = _spin(store)
    store.join_room(room.code, 'sid-Bo', 'Bo')

    reveals.schedule(flask_app, outcome, 1.0)
    store.leave('sid-Ana')
    sio.run_tasks()

    assert room.code in store
    emitted = {event: (data, to) for event, data, to in sio.emitted}
    assert emitted['spinResult'] == (outcome.to_dict(), room.code)
    assert emitted['spinResult'][0]['playerId'] == 'sid-Ana'
    board, to = emitted['updateLeaderboard']
    assert to == room.code
    assert [row['name'] for row in board] == ['Bo']
    assert reveals.pending() == set()


def test_janitor_loop_keeps_running_after_failed_sweep(flask_app, clock, caplog):
    store = RoomStore(clock=clock)
    room = store.create_room()
    clock.advance(TWO_HOURS + 1)
    janitor = Janitor(store, max_age_sec=TWO_HOURS, interval_sec=3600)
    sio = RecordingSocketIO()
    real_sweep = store.sweep_empty
    calls = []

    def _flaky_sweep(max_age_sec, now=None):
        calls.append(max_age_sec)
        if len(calls) == 1:
            raise RuntimeError('disk on fire')
        return real_sweep(max_age_sec, now=now)

    def _sleep(seconds):
        sio.slept.append(seconds)
        if len(sio.slept) > 2:
            janitor.stop()

    store.sweep_empty = _flaky_sweep
    sio.sleep = _sleep
    janitor.run_forever(flask_app, sio)

    assert len(calls) == 2
    assert room.code not in store
    assert 'sweep failed' in caplog.text
