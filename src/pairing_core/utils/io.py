from __future__ import annotations

import gzip
import io
import json
import os
import zlib
from pathlib import Path
from typing import IO, Any

import zstandard as zstd

CODEC_NONE = "none"
CODEC_GZIP = "gzip"
CODEC_ZSTD = "zstd"

GZIP_MAGIC = b"\x1f\x8b"
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

CODEC_SUFFIXES = {CODEC_NONE: "", CODEC_GZIP: ".gz", CODEC_ZSTD: ".zst"}

# Errors a damaged or truncated stream can raise while reading
STREAM_ERRORS: tuple[type[Exception], ...] = (OSError, EOFError, zlib.error, zstd.ZstdError)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def detect_compression(path: Path) -> str:
    """Sniff the codec of ``path`` from its leading magic bytes, not its name."""
    with path.open("rb") as f:
        head = f.read(len(ZSTD_MAGIC))
    if head.startswith(GZIP_MAGIC):
        return CODEC_GZIP
    if head.startswith(ZSTD_MAGIC):
        return CODEC_ZSTD
    return CODEC_NONE


def open_binary_reader(path: Path, codec: str) -> IO[bytes]:
    if codec == CODEC_GZIP:
        return gzip.open(path, "rb")
    if codec == CODEC_ZSTD:
        raw = path.open("rb")
        try:
            stream = zstd.ZstdDecompressor().stream_reader(raw, read_across_frames=True, closefd=True)
        except zstd.ZstdError as e:
            raw.close()
            raise OSError(f"Failed to open zstd file {path}: {e}") from e
        return io.BufferedReader(stream)
    return path.open("rb")


def open_binary_writer(path: Path, codec: str) -> IO[bytes]:
    if codec == CODEC_GZIP:
        # mtime=0 keeps compressed output byte-identical across runs
        return gzip.GzipFile(filename=str(path), mode="wb", mtime=0)
    if codec == CODEC_ZSTD:
        return zstd.ZstdCompressor().stream_writer(path.open("wb"), closefd=True)
    return path.open("wb")


def write_json(path: Path, obj: dict[str, Any], *, indent: int = 2) -> None:
    """Write dict to JSON file atomically."""
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(json.dumps(obj, indent=indent, ensure_ascii=False) + "\n")
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)
