"""Pair two FASTQ files through a chained hash index.

The left file is indexed by canonical id together with the offset of each
record. The right file is then streamed once: a right record whose id is in
the index is written to the paired outputs along with the left record re-read
from its offset, anything else goes to the right singles. Finally every left
entry that never matched is re-read and written to the left singles.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import TextIO

from pairing_core.config import PairingConfig
from pairing_core.counters import PairCounters
from pairing_core.exceptions import ResourceError
from pairing_core.index import HashIndex
from pairing_core.logging_config import LogContext
from pairing_core.normalize import encode_id, normalize_id, split_line_terminator
from pairing_core.paths import OutputPaths, derive_output_paths, output_codec
from pairing_core.records import FastqRecord, RecordReader, RecordWriter
from pairing_core.utils.io import CODEC_NONE, ensure_dir
from pairing_core.utils.logging import log_event

logger = logging.getLogger("pairing_core.pairing")

LEFT = "left"
RIGHT = "right"
LEFT_MATE = "1"
RIGHT_MATE = "2"

PROGRESS_EVERY = 1_000_000


@dataclasses.dataclass
class PairingOutputs:
    left_paired: RecordWriter
    right_paired: RecordWriter
    left_single: RecordWriter
    right_single: RecordWriter

    @classmethod
    def open(cls, paths: OutputPaths, codec: str, stack: ExitStack) -> PairingOutputs:
        """Create the four writers; ``stack`` closes whichever were opened."""
        writers: dict[str, RecordWriter] = {}
        for field in dataclasses.fields(cls):
            writer = RecordWriter(getattr(paths, field.name), codec=codec, stream=field.name)
            writers[field.name] = stack.enter_context(writer)
        return cls(**writers)


@dataclasses.dataclass
class PairingResult:
    counters: PairCounters
    outputs: OutputPaths
    left_codec: str
    right_codec: str
    output_codec: str
    bucket_sizes: list[int] | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "counters": self.counters.to_dict(),
            "outputs": self.outputs.as_dict(),
            "codecs": {
                "left": self.left_codec,
                "right": self.right_codec,
                "output": self.output_codec,
            },
        }


def output_header(record: FastqRecord, canonical_id: str, mate: str, *, format_id: bool) -> bytes:
    """Header line to write for ``record``: verbatim, or ``<id><mate>`` with ``format_id``."""
    if not format_id:
        return record.header
    _, terminator = split_line_terminator(record.header)
    return encode_id(canonical_id + mate) + (terminator or b"\n")


def _write(writer: RecordWriter, record: FastqRecord, canonical_id: str, mate: str, config: PairingConfig) -> None:
    if config.format_id:
        record = record.with_header(output_header(record, canonical_id, mate, format_id=True))
    writer.write_record(record)


def build_index(reader: RecordReader, config: PairingConfig, counters: PairCounters) -> HashIndex:
    """Index every left record by canonical id and start offset."""
    index = HashIndex(config.table_size)
    with LogContext(stream=LEFT, path=str(reader.path)):
        for record in reader:
            canonical_id = normalize_id(record.header, split_at_whitespace=config.split_at_whitespace)
            if config.verbose:
                logger.debug("ID first file is |%s|", canonical_id)
            if config.deduplicate:
                if not index.add_if_new(canonical_id, record.offset):
                    counters.left_duplicates += 1
                    if config.verbose:
                        logger.debug("Duplicate ID found in the first file, skipping: %s", canonical_id)
            else:
                index.insert(canonical_id, record.offset)
            if reader.records_read % PROGRESS_EVERY == 0:
                log_event(logger, "Indexed left records", records=reader.records_read, entries=len(index))
    log_event(
        logger,
        "Left index built",
        records=reader.records_read,
        entries=len(index),
        duplicates=counters.left_duplicates,
    )
    return index


def match_right(
    right: RecordReader,
    left: RecordReader,
    index: HashIndex,
    outputs: PairingOutputs,
    config: PairingConfig,
    counters: PairCounters,
) -> None:
    """Stream the right file against the left index."""
    seen_right = HashIndex(config.table_size) if config.deduplicate else None
    with LogContext(stream=RIGHT, path=str(right.path)):
        for record in right:
            canonical_id = normalize_id(record.header, split_at_whitespace=config.split_at_whitespace)
            if config.verbose:
                logger.debug("ID second file is |%s|", canonical_id)
            if right.records_read % PROGRESS_EVERY == 0:
                log_event(logger, "Matched right records", records=right.records_read)

            if seen_right is not None and not seen_right.add_if_new(canonical_id, record.offset):
                counters.right_duplicates += 1
                if config.verbose:
                    logger.debug("Duplicate ID found in the second file, skipping: %s", canonical_id)
                continue

            entry = index.mark_matches(canonical_id)
            if entry is None:
                _write(outputs.right_single, record, canonical_id, RIGHT_MATE, config)
                counters.right_single += 1
                continue

            mate = left.read_record_at(entry.offset)
            _write(outputs.left_paired, mate, canonical_id, LEFT_MATE, config)
            counters.left_paired += 1
            _write(outputs.right_paired, record, canonical_id, RIGHT_MATE, config)
            counters.right_paired += 1


def emit_orphans(
    left: RecordReader,
    index: HashIndex,
    writer: RecordWriter,
    config: PairingConfig,
    counters: PairCounters,
) -> None:
    """Write every left entry that no right record claimed.

    Order is bucket by bucket, newest entry first within a bucket, which is
    not the order of the left file.
    """
    with LogContext(stream=LEFT, path=str(left.path)):
        for entry in index.unprinted():
            record = left.read_record_at(entry.offset)
            _write(writer, record, entry.canonical_id, LEFT_MATE, config)
            counters.left_single += 1


def write_bucket_sizes(sizes: list[int], out: TextIO) -> None:
    out.write("Bucket sizes\n")
    for bucket, size in enumerate(sizes):
        out.write(f"{bucket}\t{size}\n")


def pair_files(
    left_path: Path | str,
    right_path: Path | str,
    config: PairingConfig | None = None,
    *,
    table_out: TextIO | None = None,
) -> PairingResult:
    """Split ``left_path`` and ``right_path`` into paired and single outputs.

    Args:
        left_path: First FASTQ file; this one is indexed.
        right_path: Second FASTQ file; this one is streamed.
        config: Run settings (defaults when omitted).
        table_out: Where bucket sizes go when ``config.print_table_counts``
            is set (default: stdout).

    Returns:
        Counters, output paths and detected codecs of the run.

    Raises:
        ResourceError: An input could not be opened, an output could not be
            created, or the index could not be allocated.
        FormatError: An input ends in the middle of a record.
    """
    config = config or PairingConfig()
    left_path = Path(left_path)
    right_path = Path(right_path)
    counters = PairCounters()

    with ExitStack() as stack:
        left = stack.enter_context(RecordReader(left_path, stream=LEFT))
        right = stack.enter_context(RecordReader(right_path, stream=RIGHT))
        codec = output_codec(left.codec, right.codec)
        log_event(
            logger,
            "Detected input compression",
            left_gzipped=left.compressed,
            right_gzipped=right.compressed,
            left_codec=left.codec,
            right_codec=right.codec,
            output_compressed=codec != CODEC_NONE,
        )

        if config.output_dir is not None:
            try:
                ensure_dir(config.output_dir)
            except OSError as e:
                raise ResourceError(
                    f"Can't create output directory {config.output_dir}: {e}",
                    context={"path": str(config.output_dir), "operation": "create"},
                ) from e
        paths = derive_output_paths(left_path, right_path, codec=codec, output_dir=config.output_dir)

        index = build_index(left, config, counters)
        sizes = None
        if config.print_table_counts:
            sizes = index.bucket_sizes()
            write_bucket_sizes(sizes, table_out or sys.stdout)

        log_event(logger, "Writing outputs", **paths.as_dict())
        outputs = PairingOutputs.open(paths, codec, stack)

        match_right(right, left, index, outputs, config, counters)
        emit_orphans(left, index, outputs.left_single, config, counters)

    log_event(logger, "Pairing finished", **counters.to_dict())
    return PairingResult(
        counters=counters,
        outputs=paths,
        left_codec=left.codec,
        right_codec=right.codec,
        output_codec=codec,
        bucket_sizes=sizes,
    )
