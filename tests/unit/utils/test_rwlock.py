import threading
import time

import pytest

from shufflestore.utils.rwlock import ReadWriteLock


def test_readers_share():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read_locked():
            inside.wait()  # all three readers must be inside together

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not inside.broken
    assert lock.readers == 0


def test_writer_excludes_readers_and_writers():
    lock = ReadWriteLock()
    active = {"readers": 0, "writers": 0}
    violations = []
    guard = threading.Lock()

    def enter(kind):
        with guard:
            active[kind] += 1
            if active["writers"] > 1 or (active["writers"] and active["readers"]):
                violations.append(dict(active))

    def leave(kind):
        with guard:
            active[kind] -= 1

    def reader():
        for _ in range(50):
            with lock.read_locked():
                enter("readers")
                time.sleep(0.0001)
                leave("readers")

    def writer():
        for _ in range(50):
            with lock.write_locked():
                enter("writers")
                time.sleep(0.0001)
                leave("writers")

    threads = [threading.Thread(target=reader) for _ in range(4)]
    threads += [threading.Thread(target=writer) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    assert violations == []
    assert not lock.write_held


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    order = []
    lock.acquire_read()

    def writer():
        with lock.write_locked():
            order.append("writer")

    def late_reader():
        with lock.read_locked():
            order.append("reader")

    w = threading.Thread(target=writer)
    w.start()
    deadline = time.monotonic() + 5
    while lock._waiting_writers == 0 and time.monotonic() < deadline:
        time.sleep(0.001)
    r = threading.Thread(target=late_reader)
    r.start()
    time.sleep(0.05)
    assert order == []
    lock.release_read()
    w.join(timeout=5)
    r.join(timeout=5)
    assert order == ["writer", "reader"]


def test_unbalanced_release_raises():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_lock_released_on_exception():
    lock = ReadWriteLock()
    with pytest.raises(KeyError):
        with lock.write_locked():
            raise KeyError("x")
    assert not lock.write_held
    with lock.read_locked():
        assert lock.readers == 1
