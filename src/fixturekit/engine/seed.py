"""Reproducible random streams for samples.

Every sample owns a private :class:`random.Random`.  Without a seed the
stream is seeded from operating system entropy.  With a seed, the stream of
the ``n``-th sample drawn from a kit is derived as ``SHA256(namespace ||
seed || n)`` so that a freshly constructed kit with the same seed replays
the same sequence of samples, and concurrent samples never share state.
"""

from __future__ import annotations

import hashlib
import itertools
import random
import threading
from typing import Final

__all__ = ["rng_for", "SampleSequence"]

_NS_SAMPLE: Final = b"fixturekit/v1/sample"


def rng_for(seed: int | None, sequence: int) -> random.Random:
    """Return the random source for sample number ``sequence``."""

    if seed is None:
        return random.Random()
    data = _NS_SAMPLE + str(seed).encode("ascii") + b"/" + str(sequence).encode("ascii")
    digest = hashlib.sha256(data).digest()
    return random.Random(int.from_bytes(digest, "big"))


class SampleSequence:
    """Thread-safe allocator of sample sequence numbers."""

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)

    def reserve(self, count: int) -> range:
        """Reserve ``count`` consecutive sequence numbers."""

        if count <= 0:
            return range(0)
        with self._lock:
            start = next(self._counter)
            for _ in range(count - 1):
                next(self._counter)
        return range(start, start + count)
