"""
Base voter.

For every string offset S and every address A sharing its page-offset
bucket, A - S is a candidate load base. Candidates explained by a single
pair are discarded; the rest are ranked by how many pairs support them.
"""
import collections
import logging
from dataclasses import dataclass
from typing import Optional

from basefind.scan import fork_join

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    base: int
    support: int
    share: float = 0.0


class Ranking:
    """Candidates ordered by support, highest first, lowest base on ties."""

    def __init__(self, tally, total=None):
        self.candidates = len(tally)
        self.total = sum(tally.values()) if total is None else total
        ranked = sorted(
            ((base, n) for base, n in tally.items() if n > 1),
            key=lambda item: (-item[1], item[0]),
        )
        self.entries = [
            Candidate(base, n, n / self.total if self.total else 0.0)
            for base, n in ranked
        ]

    def best(self) -> Optional[Candidate]:
        return self.entries[0] if self.entries else None

    def top(self, n=10):
        return self.entries[:n]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

    def __bool__(self):
        return bool(self.entries)


def vote_bucket(strings, addresses, tally):
    for offset in strings:
        for address, occurrences in addresses.items():
            if address >= offset:
                tally[address - offset] += occurrences


def vote(string_index, address_index, workers=1):
    keys = [k for k in string_index if k in address_index]
    log.info(
        "%d of %d string buckets have matching addresses", len(keys), len(string_index)
    )

    # one local tally per worker, summed once every worker has joined
    shards = [keys[i::workers] for i in range(workers)]

    def tally_shard(shard):
        tally = collections.Counter()
        for key in shard:
            vote_bucket(string_index[key], address_index[key], tally)
        return tally

    tally = collections.Counter()
    for partial in fork_join(tally_shard, [s for s in shards if s], workers):
        tally.update(partial)
    log.info("found %d candidates", len(tally))

    ranking = Ranking(tally)
    log.info("found %d filtered candidates", len(ranking))
    return ranking
