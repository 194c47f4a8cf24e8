"""
Three-phase run: the two locators in parallel, then the voter once both
indices are complete.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from basefind.addresses import locate_addresses
from basefind.strings import locate_strings
from basefind.vote import vote

log = logging.getLogger(__name__)


def build_indices(buffer, config):
    config.validate()
    with ThreadPoolExecutor(max_workers=2) as pool:
        strings = pool.submit(locate_strings, buffer, config)
        addresses = pool.submit(locate_addresses, buffer, config)
        return strings.result(), addresses.result()


def find_base(buffer, config):
    strings, addresses = build_indices(buffer, config)
    log.debug("string index %r, address index %r", strings, addresses)
    return vote(strings, addresses, workers=config.workers)
