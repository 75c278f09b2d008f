import threading

from golfnav.location.state import RoundState, RoundStateStore

from .factories import ORIGIN


def test_put_and_get_are_keyed_by_user_and_round() -> None:
    store = RoundStateStore()
    store.put(("u1", "r1"), RoundState(anchor=ORIGIN))
    assert store.get(("u1", "r1")).anchor == ORIGIN
    assert store.get(("u1", "r2")) is None
    assert store.get(("u2", "r1")) is None
    assert len(store) == 1


def test_copy_is_independent() -> None:
    state = RoundState(anchor=ORIGIN)
    working = state.copy()
    working.anchor = None
    assert state.anchor == ORIGIN


def test_same_key_is_serialized() -> None:
    store = RoundStateStore()
    key = ("u1", "r1")
    store.put(key, RoundState())
    counter = {"value": 0}

    def bump() -> None:
        for _ in range(200):
            with store.lock(key):
                current = counter["value"]
                counter["value"] = current + 1

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert counter["value"] == 1600


def test_different_keys_do_not_block_each_other() -> None:
    store = RoundStateStore()
    entered = threading.Event()

    def other_round() -> None:
        with store.lock(("u2", "r9")):
            entered.set()

    with store.lock(("u1", "r1")):
        thread = threading.Thread(target=other_round)
        thread.start()
        assert entered.wait(timeout=2.0)
    thread.join()


def test_discard_and_clear() -> None:
    store = RoundStateStore()
    store.put(("u1", "r1"), RoundState())
    store.put(("u1", "r2"), RoundState())
    store.discard(("u1", "r1"))
    assert store.get(("u1", "r1")) is None
    store.clear()
    assert len(store) == 0


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_least_recently_used_round_is_evicted_beyond_cap() -> None:
    store = RoundStateStore(cap=2)
    store.put(("u1", "r1"), RoundState())
    store.put(("u1", "r2"), RoundState())
    store.get(("u1", "r1"))
    store.put(("u1", "r3"), RoundState())
    assert store.get(("u1", "r2")) is None
    assert store.get(("u1", "r1")) is not None
    assert store.get(("u1", "r3")) is not None
    assert store.tracked_rounds == 2


def test_many_rounds_stay_bounded() -> None:
    store = RoundStateStore(cap=50)
    for n in range(500):
        key = ("u1", f"r{n}")
        with store.lock(key):
            store.put(key, RoundState())
    assert len(store) == 50
    assert store.tracked_rounds == 50


def test_round_in_use_is_not_evicted() -> None:
    store = RoundStateStore(cap=1)
    busy = ("u1", "busy")
    with store.lock(busy):
        store.put(busy, RoundState(anchor=ORIGIN))
        store.put(("u1", "r2"), RoundState())
        store.put(("u1", "r3"), RoundState())
        assert store.get(busy).anchor == ORIGIN
    assert store.tracked_rounds == 1


def test_idle_rounds_expire() -> None:
    clock = FakeClock()
    store = RoundStateStore(idle_seconds=60.0, clock=clock)
    store.put(("u1", "old"), RoundState())
    clock.now += 30.0
    store.put(("u1", "recent"), RoundState())
    clock.now += 45.0
    store.put(("u1", "new"), RoundState())
    assert store.get(("u1", "old")) is None
    assert store.get(("u1", "recent")) is not None
    assert len(store) == 2


def test_waiting_caller_keeps_round_alive() -> None:
    store = RoundStateStore(cap=1)
    key = ("u1", "r1")
    acquired = threading.Event()

    def waiter() -> None:
        with store.lock(key):
            acquired.set()

    with store.lock(key):
        thread = threading.Thread(target=waiter)
        thread.start()
        store.put(("u1", "r2"), RoundState())
    thread.join(timeout=2.0)
    assert acquired.is_set()
