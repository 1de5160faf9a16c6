"""Seekable FASTQ record reader and writer.

A record is exactly four lines: header, sequence, separator and quality.
Offsets are byte positions in the decompressed stream, so an offset taken
from :meth:`RecordReader.position` can be handed back to
:meth:`RecordReader.seek` whatever the codec of the file.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any, IO

from pairing_core.exceptions import FormatError, ResourceError
from pairing_core.utils.io import (
    CODEC_NONE,
    CODEC_ZSTD,
    STREAM_ERRORS,
    detect_compression,
    open_binary_reader,
    open_binary_writer,
)

logger = logging.getLogger("pairing_core.records")

LINES_PER_RECORD = 4

_SKIP_CHUNK = 1024 * 1024


@dataclasses.dataclass(frozen=True)
class FastqRecord:
    header: bytes
    sequence: bytes
    separator: bytes
    quality: bytes
    offset: int = 0

    def lines(self) -> tuple[bytes, bytes, bytes, bytes]:
        return (self.header, self.sequence, self.separator, self.quality)

    def with_header(self, header: bytes) -> FastqRecord:
        return dataclasses.replace(self, header=header)


class RecordReader:
    """Forward reader with random access to previously seen record offsets.

    The codec is sniffed once when the stream is opened. Plain and gzip
    streams seek natively; zstd streams only move forward, so seeking back
    reopens the stream and skips ahead.
    """

    def __init__(self, path: Path | str, *, stream: str = "input") -> None:
        self.path = Path(path)
        self.stream = stream
        try:
            self.codec = detect_compression(self.path)
            self._fh: IO[bytes] = open_binary_reader(self.path, self.codec)
        except OSError as e:
            raise ResourceError(
                f"Can't open {stream} file {self.path}: {e}",
                context={"path": str(self.path), "stream": stream, "operation": "open"},
            ) from e
        self._position = 0
        self._records = 0

    @property
    def compressed(self) -> bool:
        return self.codec != CODEC_NONE

    @property
    def records_read(self) -> int:
        return self._records

    def position(self) -> int:
        return self._position

    def seek(self, offset: int) -> None:
        if offset == self._position:
            return
        try:
            if self.codec != CODEC_ZSTD:
                self._fh.seek(offset)
            else:
                if offset < self._position:
                    logger.debug("Rewinding %s stream %s to offset %d", self.stream, self.path, offset)
                    self._fh.close()
                    self._fh = open_binary_reader(self.path, self.codec)
                    self._position = 0
                self._skip(offset - self._position)
        except STREAM_ERRORS as e:
            raise ResourceError(
                f"Can't seek to offset {offset} in {self.stream} file {self.path}: {e}",
                context={"path": str(self.path), "stream": self.stream, "operation": "seek", "offset": offset},
            ) from e
        self._position = offset

    def _skip(self, count: int) -> None:
        while count > 0:
            chunk = self._fh.read(min(count, _SKIP_CHUNK))
            if not chunk:
                raise OSError("unexpected end of stream")
            count -= len(chunk)

    def _readline(self) -> bytes:
        try:
            line = self._fh.readline()
        except STREAM_ERRORS as e:
            raise ResourceError(
                f"Can't read {self.stream} file {self.path} at offset {self._position}: {e}",
                context={"path": str(self.path), "stream": self.stream, "operation": "read", "offset": self._position},
            ) from e
        self._position += len(line)
        return line

    def read_record(self) -> FastqRecord | None:
        """Read the next record, or return None at end of stream.

        Raises:
            FormatError: The stream ends after the header but before the
                quality line.
        """
        start = self._position
        header = self._readline()
        if not header:
            return None
        rest: list[bytes] = []
        for _ in range(LINES_PER_RECORD - 1):
            line = self._readline()
            if not line:
                raise FormatError(
                    f"{self.stream} file {self.path} ends in the middle of record "
                    f"{self._records + 1} starting at offset {start}: expected "
                    f"{LINES_PER_RECORD} lines, found {len(rest) + 1}",
                    stream=self.stream,
                    path=str(self.path),
                    record=self._records + 1,
                    offset=start,
                )
            rest.append(line)
        self._records += 1
        return FastqRecord(header, rest[0], rest[1], rest[2], offset=start)

    def read_record_at(self, offset: int) -> FastqRecord:
        """Re-read the record that started at ``offset`` during the forward scan."""
        self.seek(offset)
        record = self.read_record()
        if record is None:
            raise FormatError(
                f"No record at offset {offset} in {self.stream} file {self.path}",
                stream=self.stream,
                path=str(self.path),
                record=self._records,
                offset=offset,
            )
        return record

    def __iter__(self) -> Iterator[FastqRecord]:
        while True:
            record = self.read_record()
            if record is None:
                return
            yield record

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> RecordReader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class RecordWriter:
    def __init__(self, path: Path | str, *, codec: str = CODEC_NONE, stream: str = "output") -> None:
        self.path = Path(path)
        self.codec = codec
        self.stream = stream
        try:
            self._fh: IO[bytes] = open_binary_writer(self.path, codec)
        except OSError as e:
            raise ResourceError(
                f"Can't create {stream} file {self.path}: {e}",
                context={"path": str(self.path), "stream": stream, "operation": "create"},
            ) from e
        self.records_written = 0

    def write_line(self, line: bytes) -> None:
        try:
            self._fh.write(line)
        except OSError as e:
            raise ResourceError(
                f"Can't write to {self.stream} file {self.path}: {e}",
                context={"path": str(self.path), "stream": self.stream, "operation": "write"},
            ) from e

    def write_record(self, record: FastqRecord) -> None:
        for line in record.lines():
            # last line of an input may lack its newline
            if not line.endswith(b"\n"):
                line += b"\n"
            self.write_line(line)
        self.records_written += 1

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> RecordWriter:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
