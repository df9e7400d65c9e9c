import threading
import time

import pytest

from image_server.application.single_flight import SingleFlight


def test_concurrent_callers_share_one_execution():
    flights = SingleFlight()
    started = threading.Event()
    release = threading.Event()
    calls = []

    def work():
        calls.append(1)
        started.set()
        release.wait(5)
        return "done"

    results = []
    leader = threading.Thread(target=lambda: results.append(flights.do("k", work)))
    leader.start()
    assert started.wait(5)

    followers = [threading.Thread(target=lambda: results.append(flights.do("k", work))) for _ in range(4)]
    for t in followers:
        t.start()
    # give followers time to attach to the running call
    time.sleep(0.2)
    release.set()
    for t in [leader] + followers:
        t.join(5)

    assert results == ["done"] * 5
    assert flights._in_flight() == 0
    assert len(calls) == 1


def test_error_is_raised_and_key_forgotten():
    flights = SingleFlight()

    def boom():
        raise ValueError("nope")

    with pytest.raises(ValueError):
        flights.do("k", boom)
    assert flights._in_flight() == 0
    assert flights.do("k", lambda: 42) == 42


def test_waiters_receive_leader_exception():
    flights = SingleFlight()
    started = threading.Event()
    release = threading.Event()
    errors = []

    def boom():
        started.set()
        release.wait(5)
        raise RuntimeError("failed once")

    def call():
        try:
            flights.do("k", boom)
        except RuntimeError as e:
            errors.append(str(e))

    leader = threading.Thread(target=call)
    leader.start()
    assert started.wait(5)
    follower = threading.Thread(target=call)
    follower.start()
    release.set()
    leader.join(5)
    follower.join(5)

    assert errors == ["failed once", "failed once"]
