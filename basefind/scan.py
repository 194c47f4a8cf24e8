"""
Plumbing shared by the locators and the voter: page-offset bucketing,
chunking of the image and the fork-join worker pool.
"""
import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType

log = logging.getLogger(__name__)


def make_mask(n):
    return (1 << n) - 1


def page_key(value, bits=12):
    return value & make_mask(bits)


def partition(length, parts, overlap=0):
    """Split range(length) into at most `parts` contiguous chunks.

    Yields (start, stop, end) triples: matches are expected to *start* in
    [start, stop) while the chunk may be read up to `end`, which extends
    `overlap` bytes into the following chunk and is clipped to `length`.
    """
    if length <= 0:
        return []
    size = -(-length // max(parts, 1))
    return [
        (start, min(start + size, length), min(start + size + overlap, length))
        for start in range(0, length, size)
    ]


def fork_join(func, items, workers):
    """Run func over items on a fixed pool and wait for every result."""
    items = list(items)
    if not items:
        return []
    workers = max(1, min(workers, len(items)))
    log.debug("dispatching %d tasks to %d workers", len(items), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(func, items))


class PageIndex(Mapping):
    """Read-only map of page-offset key -> {value: weight}.

    Values are file offsets or addresses; the weight is the number of times
    the value was observed (1 for string offsets).
    """

    def __init__(self, weights, bits=12):
        self.bits = bits
        mask = make_mask(bits)
        buckets = {}
        for value, weight in weights.items():
            buckets.setdefault(value & mask, {})[value] = weight
        self._buckets = {k: MappingProxyType(v) for k, v in buckets.items()}

    @classmethod
    def from_values(cls, values, bits=12):
        return cls(dict.fromkeys(values, 1), bits=bits)

    def __getitem__(self, key):
        return self._buckets[key]

    def __iter__(self):
        return iter(self._buckets)

    def __len__(self):
        return len(self._buckets)

    def values_count(self):
        return sum(len(b) for b in self._buckets.values())

    def __repr__(self):
        return (
            f"<{type(self).__name__} buckets={len(self)} "
            f"values={self.values_count()}>"
        )
