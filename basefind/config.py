"""
Scan configuration.

A run is fully described by a ScanConfig; every field is validated before
any part of the image is touched.
"""
import os
import re
from dataclasses import dataclass
from typing import Optional

WORD_WIDTHS = (32, 64)
BYTE_ORDERS = ("little", "big")

DEFAULT_CHARSET = "a-zA-Z0-9_"
DEFAULT_CAP = 1 << 20


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ScanConfig:
    word_width: int = 32
    byte_order: str = "little"
    min_len: int = 10
    max_len: int = 1024
    max_strings: Optional[int] = DEFAULT_CAP
    max_addresses: Optional[int] = DEFAULT_CAP
    charset: str = DEFAULT_CHARSET
    page_bits: int = 12
    workers: int = os.cpu_count() or 1

    @property
    def word_size(self):
        return self.word_width // 8

    def char_class(self):
        """Compile the printable class, raising ConfigError if it is unusable.

        The result is normalized to an explicit single-byte class, so odd
        but valid specs cannot change the shape of the string pattern.
        """
        try:
            cls = re.compile(f"[{self.charset}]".encode("latin-1"))
        except (re.error, UnicodeEncodeError) as e:
            raise ConfigError(f"bad charset {self.charset!r}: {e}") from None
        allowed = [bytes([c]) for c in range(256) if cls.fullmatch(bytes([c]))]
        if not allowed:
            raise ConfigError(f"charset {self.charset!r} matches nothing")
        if b"\x00" in allowed:
            raise ConfigError(f"charset {self.charset!r} must not admit NUL")
        return re.compile(b"[" + b"".join(re.escape(c) for c in allowed) + b"]")

    def validate(self):
        if self.word_width not in WORD_WIDTHS:
            raise ConfigError(f"word width must be 32 or 64, not {self.word_width}")
        if self.byte_order not in BYTE_ORDERS:
            raise ConfigError(f"unknown byte order {self.byte_order!r}")
        if self.min_len < 1:
            raise ConfigError("minimum string length must be positive")
        if self.min_len > self.max_len:
            raise ConfigError(
                f"minimum string length {self.min_len} exceeds maximum {self.max_len}"
            )
        if not self.charset:
            raise ConfigError("charset is empty")
        self.char_class()
        if not 0 <= self.page_bits <= self.word_width:
            raise ConfigError(f"mask width {self.page_bits} out of range")
        for name in ("max_strings", "max_addresses"):
            cap = getattr(self, name)
            if cap is not None and cap < 1:
                raise ConfigError(f"{name} must be positive")
        if self.workers < 1:
            raise ConfigError("worker count must be positive")
        return self

    def describe(self):
        return [
            ("size", f"{self.word_width}-bit"),
            ("endian", self.byte_order),
            ("min", self.min_len),
            ("max", self.max_len),
            ("charset", self.charset),
            ("mask", f"{self.page_bits} bits"),
            ("jobs", self.workers),
        ]
