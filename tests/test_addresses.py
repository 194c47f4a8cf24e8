from dataclasses import replace

import pytest

from basefind import ConfigError, ScanConfig, locate_addresses


def weights(index):
    return {a: n for bucket in index.values() for a, n in bucket.items()}


def test_repeated_words_kept(image, config):
    img = image(0x100)
    img.word(0x10, 0x8000_1234)
    img.word(0x40, 0x8000_1234)
    img.word(0x80, 0x8000_1234)
    img.word(0x20, 0x5555)
    index = locate_addresses(img.bytes(), config)
    assert weights(index) == {0x8000_1234: 3}
    assert list(index) == [0x234]


def test_zero_never_indexed(config):
    assert len(locate_addresses(bytes(0x100), config)) == 0


def test_unaligned_words_ignored(image, config):
    img = image(0x100)
    img.buf[0x11:0x15] = (0x1234).to_bytes(4, "little")
    img.buf[0x32:0x36] = (0x1234).to_bytes(4, "little")
    assert len(locate_addresses(img.bytes(), config)) == 0


def test_trailing_partial_word_ignored(config):
    data = (0x42).to_bytes(4, "little") * 2 + b"\x42\x00"
    assert weights(locate_addresses(data, config)) == {0x42: 2}


@pytest.mark.parametrize("endian", ["little", "big"])
@pytest.mark.parametrize("width", [32, 64])
def test_width_and_order(image, config, width, endian):
    value = 0x1122_3344 if width == 32 else 0x1122_3344_5566_7788
    img = image(0x200, width=width, endian=endian)
    img.word(0x40, value)
    img.word(0x100, value)
    cfg = replace(config, word_width=width, byte_order=endian)
    assert weights(locate_addresses(img.bytes(), cfg)) == {value: 2}


def test_counts_merged_across_workers(image, config):
    img = image(0x1000)
    # one copy in each quarter of the image
    for off in (0x10, 0x410, 0x810, 0xC10):
        img.word(off, 0xDEAD_BEEF)
    for workers in (1, 4, 9):
        cfg = replace(config, workers=workers)
        assert weights(locate_addresses(img.bytes(), cfg)) == {0xDEAD_BEEF: 4}


def test_sampling_cap_keeps_lowest(image, config):
    img = image(0x100)
    for i, value in enumerate((0x3000, 0x1000, 0x2000)):
        img.word(0x10 * i, value)
        img.word(0x80 + 0x10 * i, value)
    index = locate_addresses(img.bytes(), replace(config, max_addresses=2))
    assert weights(index) == {0x1000: 2, 0x2000: 2}


def test_short_buffer(config):
    assert len(locate_addresses(b"\x01\x02\x03", config)) == 0


def test_bad_width():
    with pytest.raises(ConfigError):
        locate_addresses(b"\x00" * 16, ScanConfig(word_width=16))
