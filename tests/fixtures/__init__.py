"""FASTQ builders and readers shared by the test modules."""

from __future__ import annotations

import gzip
from collections.abc import Iterable
from pathlib import Path

import zstandard as zstd

Read = tuple[str, str, str]


def fastq_bytes(reads: Iterable[Read | str]) -> bytes:
    """Render reads as FASTQ. A bare string becomes ``@<id>`` with a fixed body."""
    chunks: list[str] = []
    for read in reads:
        if isinstance(read, str):
            read = (read, "ACGT", "IIII")
        header, sequence, quality = read
        chunks.append(f"@{header}\n{sequence}\n+\n{quality}\n")
    return "".join(chunks).encode("utf-8")


def write_raw(path: Path, data: bytes, codec: str = "none") -> Path:
    if codec == "gzip":
        with gzip.open(path, "wb") as f:
            f.write(data)
    elif codec == "zstd":
        path.write_bytes(zstd.ZstdCompressor().compress(data))
    else:
        path.write_bytes(data)
    return path


def read_raw(path: Path) -> bytes:
    data = path.read_bytes()
    if data[:2] == b"\x1f\x8b":
        return gzip.decompress(data)
    if data[:4] == b"\x28\xb5\x2f\xfd":
        return zstd.ZstdDecompressor().decompressobj().decompress(data)
    return data


def headers(path: Path) -> list[str]:
    """Header lines of a FASTQ output, in file order."""
    lines = read_raw(path).decode("utf-8").splitlines()
    return lines[0::4]
