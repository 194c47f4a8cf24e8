import struct

import pytest

from basefind import ScanConfig


class Image:
    def __init__(self, size, width=32, endian="little"):
        self.buf = bytearray(size)
        fmt = {32: "I", 64: "Q"}[width]
        self.fmt = ("<" if endian == "little" else ">") + fmt

    def string(self, offset, text):
        data = text.encode() + b"\x00"
        self.buf[offset:offset + len(data)] = data
        return offset

    def word(self, offset, value):
        struct.pack_into(self.fmt, self.buf, offset, value)

    def bytes(self):
        return bytes(self.buf)


@pytest.fixture
def image():
    return Image


@pytest.fixture
def config():
    return ScanConfig(min_len=10, max_len=32, workers=4)
