from __future__ import annotations

import threading

from fixturekit.engine.seed import SampleSequence, rng_for


def test_rng_determinism() -> None:
    r1 = rng_for(42, 3)
    r2 = rng_for(42, 3)
    assert [r1.random() for _ in range(3)] == [r2.random() for _ in range(3)]


def test_sequence_sensitivity() -> None:
    assert rng_for(42, 0).random() != rng_for(42, 1).random()


def test_seed_sensitivity() -> None:
    assert rng_for(1, 0).random() != rng_for(2, 0).random()


def test_unseeded_streams_are_independent() -> None:
    r1 = rng_for(None, 0)
    r2 = rng_for(None, 0)
    assert [r1.random() for _ in range(4)] != [r2.random() for _ in range(4)]


def test_reserve_is_contiguous() -> None:
    seq = SampleSequence()
    assert seq.next() == 0
    assert list(seq.reserve(3)) == [1, 2, 3]
    assert list(seq.reserve(0)) == []
    assert seq.next() == 4


def test_sequence_thread_safety() -> None:
    seq = SampleSequence()
    seen: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(200):
            n = seq.next()
            with lock:
                seen.append(n)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(seen) == list(range(800))
