"""Shared helpers for I/O and structured logging."""

from pairing_core.utils.io import (
    CODEC_GZIP,
    CODEC_NONE,
    CODEC_ZSTD,
    detect_compression,
    ensure_dir,
    open_binary_reader,
    open_binary_writer,
    write_json,
)
from pairing_core.utils.logging import log_event, utc_now

__all__ = [
    "CODEC_GZIP",
    "CODEC_NONE",
    "CODEC_ZSTD",
    "detect_compression",
    "ensure_dir",
    "open_binary_reader",
    "open_binary_writer",
    "write_json",
    "log_event",
    "utc_now",
]
