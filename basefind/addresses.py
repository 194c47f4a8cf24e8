"""
Address locator.

Every aligned word of the image is decoded as a candidate pointer. Values
held by a single slot are dropped: real pointers tend to be stored more
than once, while a lone value is more likely plain data.
"""
import logging

import numpy as np

from basefind.scan import PageIndex, fork_join, partition

log = logging.getLogger(__name__)

BYTE_ORDER_CODES = {"little": "<", "big": ">"}


def word_dtype(width, byte_order):
    return np.dtype(f"{BYTE_ORDER_CODES[byte_order]}u{width // 8}")


def read_words(buffer, width, byte_order):
    dtype = word_dtype(width, byte_order)
    count = len(buffer) // dtype.itemsize
    if not count:
        return np.empty(0, dtype=dtype)
    return np.frombuffer(buffer, dtype=dtype, count=count)


def count_words(words):
    words = words[words != 0]
    return np.unique(words, return_counts=True)


def merge_counts(parts):
    if not parts:
        return np.empty(0, dtype=np.uint64), np.empty(0, dtype=np.int64)
    values = np.concatenate([v for v, _ in parts])
    counts = np.concatenate([c for _, c in parts])
    merged, inverse = np.unique(values, return_inverse=True)
    totals = np.zeros(len(merged), dtype=np.int64)
    np.add.at(totals, inverse.reshape(-1), counts)
    return merged, totals


def locate_addresses(buffer, config):
    config.validate()
    words = read_words(buffer, config.word_width, config.byte_order)
    log.info("read %d words", len(words))

    chunks = partition(len(words), config.workers)
    parts = fork_join(lambda c: count_words(words[c[0]:c[1]]), chunks, config.workers)
    values, counts = merge_counts(parts)
    log.info("found %d distinct addresses", len(values))

    keep = counts > 1
    values, counts = values[keep], counts[keep]
    if config.max_addresses is not None and len(values) > config.max_addresses:
        # np.unique output is sorted, so this keeps the lowest values
        log.info("sampling %d of %d addresses", config.max_addresses, len(values))
        values = values[:config.max_addresses]
        counts = counts[:config.max_addresses]
    log.info("found %d repeated addresses", len(values))

    weights = dict(zip(values.tolist(), counts.tolist()))
    return PageIndex(weights, bits=config.page_bits)
