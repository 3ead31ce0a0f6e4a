import threading

import pytest

from core.queue import Channel, ChannelClosed


def test_fifo_then_closed():
    ch = Channel(4)
    for i in range(3):
        ch.put(i)
    ch.close()
    assert list(ch) == [0, 1, 2]
    with pytest.raises(ChannelClosed):
        ch.get()


def test_put_after_close_raises():
    ch = Channel(2, name="tasks")
    ch.close()
    ch.close()  # idempotent
    assert ch.closed
    with pytest.raises(ChannelClosed):
        ch.put(1)


def test_zero_capacity_rejected():
    with pytest.raises(ValueError):
        Channel(0)


def test_put_blocks_while_full():
    ch = Channel(1)
    ch.put("first")
    done = threading.Event()

    def producer():
        ch.put("second")
        done.set()

    threading.Thread(target=producer, daemon=True).start()
    assert not done.wait(0.2)
    assert ch.get() == "first"
    assert done.wait(2)
    assert ch.get() == "second"


def test_close_stops_every_consumer():
    ch = Channel(3)
    seen = []
    lock = threading.Lock()

    def consumer():
        for item in ch:
            with lock:
                seen.append(item)

    consumers = [threading.Thread(target=consumer, daemon=True) for _ in range(5)]
    for t in consumers:
        t.start()
    for i in range(200):
        ch.put(i)
    ch.close()
    for t in consumers:
        t.join(timeout=5)

    assert not any(t.is_alive() for t in consumers)
    assert sorted(seen) == list(range(200))
