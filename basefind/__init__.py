"""
Guess the load base of a flat binary image from pointers to its strings.
"""
from basefind.addresses import locate_addresses
from basefind.config import ConfigError, ScanConfig
from basefind.pipeline import build_indices, find_base
from basefind.scan import PageIndex, page_key
from basefind.strings import locate_strings
from basefind.vote import Candidate, Ranking, vote

__version__ = "0.2.0"

__all__ = [
    "Candidate",
    "ConfigError",
    "PageIndex",
    "Ranking",
    "ScanConfig",
    "build_indices",
    "find_base",
    "locate_addresses",
    "locate_strings",
    "page_key",
    "vote",
]
