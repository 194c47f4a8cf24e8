"""
Guess the load base of a flat binary image.

Strings and pointer-sized words are located in parallel; every pointer
whose page offset matches a string's proposes `pointer - string offset` as
the base, and the most supported proposal wins.
"""
import argparse
import contextlib
import logging
import math
import mmap
import sys
import time

from yaspin import yaspin

from basefind.config import DEFAULT_CAP, ConfigError, ScanConfig
from basefind.pipeline import build_indices
from basefind.vote import vote

log = logging.getLogger("basefind")


@contextlib.contextmanager
def phase(text, enabled=True):
    if not enabled:
        yield
        return
    with yaspin(text=text, color="cyan") as sp:
        try:
            yield
        except BaseException:
            sp.fail("[!]")
            raise
        sp.ok("[+]")


@contextlib.contextmanager
def open_image(path):
    with open(path, "rb") as f:
        try:
            m = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        except ValueError:
            # zero-length files cannot be mapped
            yield b""
            return
        with m:
            yield m


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="basefind", description=__doc__.strip().splitlines()[0])
    p.add_argument("file", help="image to analyze")

    size = p.add_mutually_exclusive_group()
    size.add_argument("--32", dest="width", action="store_const", const=32,
                      help="image is 32-bit (default)")
    size.add_argument("--64", dest="width", action="store_const", const=64,
                      help="image is 64-bit")
    endian = p.add_mutually_exclusive_group()
    endian.add_argument("--little", dest="endian", action="store_const", const="little",
                        help="image is little-endian (default)")
    endian.add_argument("--big", dest="endian", action="store_const", const="big",
                        help="image is big-endian")
    p.set_defaults(width=32, endian="little")

    p.add_argument("--min", default=10, type=int, help="minimum string length")
    p.add_argument("--max", default=1024, type=int, help="maximum string length")
    p.add_argument("--max-strings", default=DEFAULT_CAP, type=int,
                   help="cap on sampled string offsets")
    p.add_argument("--max-addresses", default=DEFAULT_CAP, type=int,
                   help="cap on sampled addresses")
    p.add_argument("--charset", default=ScanConfig.charset,
                   help="character class of string bytes, regex syntax without brackets")
    p.add_argument("--mask", default=12, type=int,
                   help="number of low bits compared between pointers and strings")
    p.add_argument("-j", "--jobs", default=ScanConfig.workers, type=int,
                   help="number of worker threads")
    p.add_argument("-n", "--top", default=10, type=int,
                   help="number of candidates shown with --verbose")
    p.add_argument("-v", "--verbose", default=False, action="store_true")
    p.add_argument("--no-progress", default=False, action="store_true")
    return p, p.parse_args(argv)


def make_config(args):
    return ScanConfig(
        word_width=args.width,
        byte_order=args.endian,
        min_len=args.min,
        max_len=args.max,
        max_strings=args.max_strings,
        max_addresses=args.max_addresses,
        charset=args.charset,
        page_bits=args.mask,
        workers=args.jobs,
    ).validate()


def report(ranking, config, top, out=None):
    field_size = 2 * config.word_size
    entries = ranking.top(top)
    s = max(1, math.ceil(math.log10(entries[0].support + 1)))
    for idx, c in enumerate(entries, 1):
        print(
            f"{idx:2}: 0x{c.base:0{field_size}x} {c.support:>{s}} ({100 * c.share:.2f}%)",
            file=out,
        )


def main(argv=None):
    parser, args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        config = make_config(args)
    except ConfigError as e:
        parser.error(str(e))

    progress = not args.no_progress and sys.stdout.isatty()
    if args.verbose:
        print(f"file: {args.file}")
        for name, value in config.describe():
            print(f"{name}: {value}")

    start = time.perf_counter()
    try:
        with open_image(args.file) as image:
            with phase("locating strings and addresses", progress):
                strings, addresses = build_indices(image, config)
            with phase("voting", progress):
                ranking = vote(strings, addresses, workers=config.workers)
    except OSError as e:
        log.error("cannot read %s: %s", args.file, e)
        return 1
    elapsed = time.perf_counter() - start

    best = ranking.best()
    if best is None:
        print("no base found", file=sys.stderr)
        return 1

    if args.verbose:
        report(ranking, config, args.top)
        print(f"took: {elapsed:.3f}s")
    else:
        print(hex(best.base))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
