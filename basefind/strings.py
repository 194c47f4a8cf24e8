"""
String locator.

Finds NUL-terminated runs of printable bytes and indexes their file offsets
by page offset. The image is cut into overlapping windows scanned in
parallel; offsets found twice in an overlap collapse in the merge.
"""
import logging
import re

from basefind.scan import PageIndex, fork_join, partition

log = logging.getLogger(__name__)


def string_pattern(config):
    cls = config.char_class().pattern
    # the lookbehind keeps matches maximal, including at window starts
    return re.compile(
        b"(?<!" + cls + b")" + cls + b"{%d,%d}\x00" % (config.min_len, config.max_len)
    )


def iter_cstrings(pattern, buffer, start, stop, end):
    for m in pattern.finditer(buffer, start, end):
        if m.start() >= stop:
            break
        yield m.start()


def sample(values, cap):
    values = sorted(values)
    if cap is not None and len(values) > cap:
        log.info("sampling %d of %d values", cap, len(values))
        del values[cap:]
    return values


def locate_strings(buffer, config):
    config.validate()
    pattern = string_pattern(config)
    # room for a full-length string starting on the last byte of a chunk
    chunks = partition(len(buffer), config.workers, overlap=config.max_len)

    def scan_chunk(chunk):
        found = set(iter_cstrings(pattern, buffer, *chunk))
        log.debug("chunk %#x-%#x: %d strings", chunk[0], chunk[1], len(found))
        return found

    offsets = set()
    for found in fork_join(scan_chunk, chunks, config.workers):
        offsets |= found
    log.info("found %d unique strings", len(offsets))

    return PageIndex.from_values(
        sample(offsets, config.max_strings), bits=config.page_bits
    )
